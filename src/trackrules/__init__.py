"""Rule-based audio track transformation engine."""

__version__ = "0.1.0"
