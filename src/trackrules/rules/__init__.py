"""Rule engine: validation, matching, templating and command synthesis."""

from trackrules.rules.dispositions import encode_dispositions
from trackrules.rules.exceptions import (
    RuleDocumentError,
    RuleSetValidationError,
    ValidationIssue,
    WatermarkDecodeError,
)
from trackrules.rules.loader import (
    load_rules,
    parse_rules_text,
    rule_set_to_document,
    validate,
)
from trackrules.rules.matchers import find_matching_rule, matches
from trackrules.rules.plan import (
    CommandPlan,
    Instruction,
    InstructionKind,
    StreamPassthrough,
    TrackAction,
    TrackDecision,
)
from trackrules.rules.synthesizer import synthesize
from trackrules.rules.templating import expand_title
from trackrules.rules.types import (
    CodecSelector,
    CodecSelectorKind,
    ComparisonOperator,
    CopyOperation,
    IntCondition,
    MatchSpec,
    Rule,
    RuleSet,
    TitlePattern,
    TranscodeOperation,
)
from trackrules.rules.watermark import (
    already_processed,
    decode_token,
    watermark,
)

__all__ = [
    "CodecSelector",
    "CodecSelectorKind",
    "CommandPlan",
    "ComparisonOperator",
    "CopyOperation",
    "Instruction",
    "InstructionKind",
    "IntCondition",
    "MatchSpec",
    "Rule",
    "RuleDocumentError",
    "RuleSet",
    "RuleSetValidationError",
    "StreamPassthrough",
    "TitlePattern",
    "TrackAction",
    "TrackDecision",
    "TranscodeOperation",
    "ValidationIssue",
    "WatermarkDecodeError",
    "already_processed",
    "decode_token",
    "encode_dispositions",
    "expand_title",
    "find_matching_rule",
    "load_rules",
    "matches",
    "parse_rules_text",
    "rule_set_to_document",
    "synthesize",
    "validate",
    "watermark",
]
