"""Idempotency watermark for processed files.

A processed file carries a marker such as::

    [trackrules:audio_rules:W3sibWF0Y2giOnsiY29kZWNzIjoiKiJ9LC4uLn1d]

in its container metadata. The token is the base64 encoding of the rule
set's canonical document, so equivalent rule sets share a token and any
change to the rules produces a new one. Tokens can be decoded back into
the rule document that produced them.
"""

from __future__ import annotations

import base64
import binascii
import json
import re
from typing import Any

from trackrules.rules.exceptions import WatermarkDecodeError
from trackrules.rules.loader import rule_set_to_document
from trackrules.rules.types import RuleSet

MARKER_PREFIX = "[trackrules:audio_rules:"
MARKER_SUFFIX = "]"

_MARKER_RE = re.compile(r"\[trackrules:audio_rules:([A-Za-z0-9+/]+={0,2})\]")


def compute_token(rule_set: RuleSet) -> str:
    """Encode a rule set's canonical document as a base64 token."""
    document = rule_set_to_document(rule_set)
    payload = json.dumps(document, separators=(",", ":"), ensure_ascii=False)
    return base64.b64encode(payload.encode("utf-8")).decode("ascii")


def format_marker(token: str) -> str:
    """Wrap a token in the bracketed marker form."""
    return f"{MARKER_PREFIX}{token}{MARKER_SUFFIX}"


def watermark(rule_set: RuleSet) -> str:
    """Return the marker stamped into files processed with this rule set."""
    return format_marker(compute_token(rule_set))


def already_processed(prior_marker_text: str | None, marker: str) -> bool:
    """Check whether existing marker text already carries this marker.

    Args:
        prior_marker_text: Marker metadata read from the file, if any.
        marker: Marker for the current rule set, from ``watermark()``.

    Returns:
        True if the exact marker is present.
    """
    if not prior_marker_text:
        return False
    return marker in prior_marker_text


def append_marker(prior_marker_text: str | None, marker: str) -> str:
    """Return the marker text to write after processing.

    Existing text is kept so markers from other rule sets survive.
    """
    return f"{prior_marker_text or ''}{marker}"


def extract_tokens(text: str) -> list[str]:
    """Return every watermark token found in marker text, in order."""
    return _MARKER_RE.findall(text or "")


def decode_token(token: str) -> list[dict[str, Any]]:
    """Decode a token (or a full marker) back into its rule document.

    Args:
        token: Bare base64 token, or text containing one marker.

    Returns:
        The rule document the token was computed from.

    Raises:
        WatermarkDecodeError: If the token is not a base64-encoded rule list.
    """
    token = token.strip()
    if token.startswith("["):
        found = extract_tokens(token)
        if not found:
            raise WatermarkDecodeError(f"Not a trackrules marker: {token!r}")
        token = found[0]

    try:
        payload = base64.b64decode(token, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise WatermarkDecodeError(f"Invalid watermark token: {e}") from e

    try:
        document = json.loads(payload)
    except json.JSONDecodeError as e:
        raise WatermarkDecodeError(f"Watermark token is not JSON: {e}") from e

    if not isinstance(document, list):
        raise WatermarkDecodeError("Watermark token does not hold a rule list")
    return document
