"""Selector matching for audio tracks.

This module decides whether a track satisfies a rule's match specification
and which rule, if any, applies to a track. All functions are pure.
"""

from __future__ import annotations

import re
from re import Pattern
from typing import TYPE_CHECKING

from trackrules.rules.types import (
    CodecSelector,
    CodecSelectorKind,
    ComparisonOperator,
    IntCondition,
    MatchSpec,
    TitlePattern,
)

if TYPE_CHECKING:
    from trackrules.domain import TrackInfo
    from trackrules.rules.types import Rule, RuleSet

_CONDITION_RE = re.compile(r"^\s*(<=|>=|<|>|=)?\s*(\d+)\s*$")


def parse_int_condition(condition: str) -> IntCondition:
    """Parse a numeric selector such as ``"<=6"``, ``">128000"`` or ``"8"``.

    A bare integer (or one prefixed with ``=``) means equality.

    Args:
        condition: Condition string from the rule document.

    Returns:
        Parsed IntCondition.

    Raises:
        ValueError: If the string is not an operator followed by an integer.
    """
    m = _CONDITION_RE.match(condition)
    if m is None:
        raise ValueError(
            f"Invalid numeric condition {condition!r}; expected an integer "
            "optionally prefixed with <=, >=, <, > or ="
        )
    operator = ComparisonOperator(m.group(1) or "=")
    return IntCondition(operator=operator, value=int(m.group(2)))


def compare(actual: int, condition: IntCondition) -> bool:
    """Evaluate a single numeric condition against a value."""
    op = condition.operator
    value = condition.value

    if op is ComparisonOperator.EQ:
        return actual == value
    elif op is ComparisonOperator.LT:
        return actual < value
    elif op is ComparisonOperator.LTE:
        return actual <= value
    elif op is ComparisonOperator.GT:
        return actual > value
    elif op is ComparisonOperator.GTE:
        return actual >= value

    return False


def matches_all_conditions(
    actual: int | None, conditions: tuple[IntCondition, ...]
) -> bool:
    """Check a value against a list of constraints (logical AND).

    An unknown value (None) fails any non-empty list of conditions.
    """
    if not conditions:
        return True
    if actual is None:
        return False
    return all(compare(actual, condition) for condition in conditions)


def codec_matches(codec: str | None, selector: CodecSelector) -> bool:
    """Check a track codec against a codec selector (case-insensitive)."""
    if selector.kind is CodecSelectorKind.ALL:
        return True
    normalized = (codec or "").lower()
    if selector.kind is CodecSelectorKind.ALL_EXCEPT:
        return normalized != selector.codecs[0]
    return normalized in selector.codecs


def compile_title_pattern(title: TitlePattern) -> Pattern[str]:
    """Compile a title pattern with its case sensitivity.

    ``re`` caches compiled patterns, so repeated calls are cheap.
    """
    flags = 0 if title.case_sensitive else re.IGNORECASE
    return re.compile(title.pattern, flags)


def dispositions_match(
    track_disposition: dict[str, int], required: dict[str, int]
) -> bool:
    """Check that every required flag is present with exactly that value."""
    for flag, value in required.items():
        if flag not in track_disposition:
            return False
        if track_disposition[flag] != value:
            return False
    return True


def matches(track: TrackInfo, spec: MatchSpec) -> bool:
    """Evaluate one track against one match specification.

    All criteria are ANDed; evaluation stops at the first failing one.

    Args:
        track: Audio track to test.
        spec: Match specification from a rule.

    Returns:
        True if the track satisfies every criterion.
    """
    if not codec_matches(track.codec, spec.codecs):
        return False

    if not matches_all_conditions(track.channels, spec.channels):
        return False

    if not matches_all_conditions(track.bit_rate, spec.bitrate):
        return False

    if spec.languages is not None:
        if (track.language or "und") not in spec.languages:
            return False

    if spec.dispositions is not None:
        if not dispositions_match(track.disposition, spec.dispositions):
            return False

    if spec.title is not None:
        if not compile_title_pattern(spec.title).search(track.title or ""):
            return False

    return True


def find_matching_rule(track: TrackInfo, rule_set: RuleSet) -> Rule | None:
    """Return the first rule whose match spec accepts the track.

    Args:
        track: Audio track to test.
        rule_set: Validated rules, in document order.

    Returns:
        The first matching Rule, or None if no rule matches.
    """
    for rule in rule_set.rules:
        if matches(track, rule.match):
            return rule
    return None
