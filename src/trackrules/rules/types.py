"""Runtime types for validated rule sets.

The rule document is parsed once by the loader into these frozen
dataclasses. Matching and command synthesis only ever see these types,
never the raw document.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union


class CodecSelectorKind(Enum):
    """How a codec selector matches a track's codec."""

    ALL = "all"  # "*"
    ANY_OF = "any_of"  # ["aac", "ac3"]
    ALL_EXCEPT = "all_except"  # "!aac"


@dataclass(frozen=True)
class CodecSelector:
    """Codec part of a match specification.

    Codec names are stored lowercased; matching is case-insensitive.
    """

    kind: CodecSelectorKind
    codecs: tuple[str, ...] = ()

    @classmethod
    def all(cls) -> CodecSelector:
        return cls(CodecSelectorKind.ALL)

    @classmethod
    def any_of(cls, *codecs: str) -> CodecSelector:
        return cls(CodecSelectorKind.ANY_OF, tuple(c.lower() for c in codecs))

    @classmethod
    def all_except(cls, codec: str) -> CodecSelector:
        return cls(CodecSelectorKind.ALL_EXCEPT, (codec.lower(),))

    def to_document(self) -> str | list[str]:
        """Return the rule document form of this selector."""
        if self.kind is CodecSelectorKind.ALL:
            return "*"
        if self.kind is CodecSelectorKind.ALL_EXCEPT:
            return f"!{self.codecs[0]}"
        return list(self.codecs)


class ComparisonOperator(Enum):
    """Operators for numeric selector conditions."""

    EQ = "="
    LT = "<"
    LTE = "<="
    GT = ">"
    GTE = ">="


@dataclass(frozen=True)
class IntCondition:
    """A single numeric condition such as ``<=6`` or ``640000``."""

    operator: ComparisonOperator
    value: int

    def __str__(self) -> str:
        if self.operator is ComparisonOperator.EQ:
            return str(self.value)
        return f"{self.operator.value}{self.value}"


@dataclass(frozen=True)
class TitlePattern:
    """Regular expression tested against a track's title."""

    pattern: str
    case_sensitive: bool = False


@dataclass(frozen=True)
class MatchSpec:
    """Declarative predicate of a rule.

    All specified criteria must match (AND logic). Empty/None criteria
    match any track.
    """

    codecs: CodecSelector
    channels: tuple[IntCondition, ...] = ()
    bitrate: tuple[IntCondition, ...] = ()
    languages: tuple[str, ...] | None = None
    dispositions: dict[str, int] | None = None
    title: TitlePattern | None = None

    def describe(self) -> str:
        """Short human-readable summary used in logs."""
        parts = [f"codecs={self.codecs.to_document()}"]
        if self.channels:
            parts.append("channels=" + ",".join(str(c) for c in self.channels))
        if self.bitrate:
            parts.append("bitrate=" + ",".join(str(c) for c in self.bitrate))
        if self.languages is not None:
            parts.append("languages=" + ",".join(self.languages))
        if self.dispositions is not None:
            parts.append(
                "dispositions="
                + ",".join(f"{k}:{v}" for k, v in self.dispositions.items())
            )
        if self.title is not None:
            parts.append(f"title=/{self.title.pattern}/")
        return " ".join(parts)


# Target codec value meaning "keep the source track's codec"
KEEP_CODEC = "copy"


@dataclass(frozen=True)
class CopyOperation:
    """Copy the matched track unchanged, optionally renaming it."""

    title: str | None = None
    dispositions: dict[str, bool] | None = None


@dataclass(frozen=True)
class TranscodeOperation:
    """Emit a re-encoded variant of the matched track."""

    codec: str
    channels: int | None = None
    bitrate: int | None = None
    title: str | None = None
    dispositions: dict[str, bool] | None = None
    filters: str | None = None

    @property
    def keeps_codec(self) -> bool:
        """True if the operation re-encodes into the source codec."""
        return self.codec.lower() == KEEP_CODEC


Operation = Union[CopyOperation, TranscodeOperation]


@dataclass(frozen=True)
class Rule:
    """A match specification and the operations applied on match.

    An empty operations tuple means the matched track is dropped.
    """

    match: MatchSpec
    operations: tuple[Operation, ...] = ()
    name: str | None = None

    @property
    def drops_track(self) -> bool:
        return not self.operations

    @property
    def label(self) -> str:
        """Rule name, or a summary of its match spec when unnamed."""
        return self.name or self.match.describe()


@dataclass(frozen=True)
class RuleSet:
    """Ordered, validated rules. First matching rule wins."""

    rules: tuple[Rule, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.rules)

    def __iter__(self):
        return iter(self.rules)
