"""Engine entry point: decide what to do with one probed file.

``process_file`` gates the synthesizer with the benign no-op cases (no
probe data, already processed, no audio) and reports the outcome as a
ProcessingResult. Nothing here touches the file itself.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from trackrules.domain import IntrospectionResult
from trackrules.logging import file_context
from trackrules.rules.plan import EMPTY_PLAN, CommandPlan
from trackrules.rules.synthesizer import synthesize
from trackrules.rules.types import RuleSet
from trackrules.rules.watermark import already_processed, append_marker, watermark

logger = logging.getLogger(__name__)


class ProcessingStatus(Enum):
    """Outcome of processing one file."""

    CHANGED = "changed"
    UNCHANGED = "unchanged"
    NO_SOURCE_DATA = "no_source_data"
    NO_AUDIO_TRACKS = "no_audio_tracks"
    ALREADY_PROCESSED = "already_processed"


@dataclass(frozen=True)
class ProcessingResult:
    """Result of running the engine against one file."""

    status: ProcessingStatus
    plan: CommandPlan = EMPTY_PLAN
    marker: str | None = None  # Marker text to persist, only when changed
    dry_run: bool = False
    file_path: str | None = None

    @property
    def should_apply(self) -> bool:
        """True if the caller should rewrite the file."""
        return self.status == ProcessingStatus.CHANGED and not self.dry_run

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-ready report."""
        return {
            "file_path": self.file_path,
            "status": self.status.value,
            "should_apply": self.should_apply,
            "dry_run": self.dry_run,
            "marker": self.marker,
            "plan": self.plan.to_dict(),
        }


def _process(
    probe: IntrospectionResult | None, rule_set: RuleSet, dry_run: bool
) -> ProcessingResult:
    marker = watermark(rule_set)

    if probe is None:
        logger.info("Probe data missing, nothing to process")
        return ProcessingResult(ProcessingStatus.NO_SOURCE_DATA, dry_run=dry_run)

    if already_processed(probe.marker_text, marker):
        logger.info("Watermark found, file already processed with these rules")
        return ProcessingResult(
            ProcessingStatus.ALREADY_PROCESSED,
            dry_run=dry_run,
            file_path=probe.file_path,
        )

    audio_tracks = probe.audio_tracks
    if not audio_tracks:
        logger.info("No audio tracks, nothing to do")
        return ProcessingResult(
            ProcessingStatus.NO_AUDIO_TRACKS,
            dry_run=dry_run,
            file_path=probe.file_path,
        )
    logger.info("%d audio tracks", len(audio_tracks))

    plan = synthesize(audio_tracks, rule_set, other_tracks=probe.other_tracks)
    if not plan.changed:
        return ProcessingResult(
            ProcessingStatus.UNCHANGED,
            plan=plan,
            dry_run=dry_run,
            file_path=probe.file_path,
        )

    if dry_run:
        logger.info("Dry run, no change will be applied: %s", plan.summary)
        for instruction in plan.instructions:
            logger.info("  %s", instruction.description)

    return ProcessingResult(
        ProcessingStatus.CHANGED,
        plan=plan,
        marker=append_marker(probe.marker_text, marker),
        dry_run=dry_run,
        file_path=probe.file_path,
    )


def process_file(
    probe: IntrospectionResult | None,
    rule_set: RuleSet,
    *,
    dry_run: bool = False,
) -> ProcessingResult:
    """Run the rule engine against one probed file.

    Checks run in order: missing probe data, existing watermark, missing
    audio tracks. Only then is the plan synthesized. The benign cases
    return a result with an empty, unchanged plan.

    Args:
        probe: Parsed probe data, or None when none was available.
        rule_set: Validated rule set.
        dry_run: Compute and log the plan but tell the caller not to apply it.

    Returns:
        ProcessingResult describing the outcome.
    """
    file_path = probe.file_path if probe is not None else None
    with file_context(file_path):
        result = _process(probe, rule_set, dry_run)
        logger.debug("Processing finished with status %s", result.status.value)
    return result
