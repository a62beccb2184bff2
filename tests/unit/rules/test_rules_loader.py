"""Tests for rule document validation and loading."""

import json
from pathlib import Path

import pytest

from trackrules.rules.exceptions import RuleDocumentError, RuleSetValidationError
from trackrules.rules.loader import (
    load_rules,
    parse_rules_text,
    rule_set_to_document,
    validate,
)
from trackrules.rules.types import (
    CodecSelectorKind,
    ComparisonOperator,
    CopyOperation,
    TranscodeOperation,
)


def rule(match=None, operations=None, **extra) -> dict:
    doc = {"match": match or {"codecs": "*"}, "operations": operations or []}
    doc.update(extra)
    return doc


def validation_error(document) -> RuleSetValidationError:
    with pytest.raises(RuleSetValidationError) as exc_info:
        validate(document)
    return exc_info.value


class TestValidateStructure:
    """Tests for document-level structure."""

    def test_root_must_be_list(self):
        """A non-list root is rejected."""
        error = validation_error({"rules": []})
        assert error.field == "rules"
        assert "list of rules" in error.message

    def test_empty_list_is_valid(self):
        """An empty document is a valid, empty rule set."""
        assert len(validate([])) == 0

    def test_rule_requires_match_and_operations(self):
        """Both match and operations are required."""
        error = validation_error([{"operations": []}])
        assert error.field == "rules[0].match"

        error = validation_error([{"match": {"codecs": "*"}}])
        assert error.field == "rules[0].operations"

    def test_unknown_rule_key_rejected(self):
        """Unknown keys are rejected."""
        error = validation_error([rule(extra_key=1)])
        assert error.field == "rules[0].extra_key"

    @pytest.mark.parametrize(
        "document,field",
        [
            (rule(description="legacy note"), "rules[0].description"),
            (rule(match={"codecs": "*", "codec": "aac"}), "rules[0].match.codec"),
            (
                rule(operations=[{"transcode": {"codec": "aac", "quality": 2}}]),
                "rules[0].operations[0].transcode.quality",
            ),
        ],
    )
    def test_unknown_keys_rejected_at_every_level(self, document, field):
        """Unknown keys anywhere in a rule are located and rejected."""
        error = validation_error([document])
        assert error.field == field
        assert "Extra inputs are not permitted" in error.message

    def test_all_or_nothing(self):
        """One bad rule invalidates the whole document."""
        error = validation_error([rule(), rule(), rule(match={"codecs": 5})])
        assert error.field == "rules[2].match.codecs"

    def test_all_issues_reported(self):
        """Every problem is attached, the message reports the first."""
        error = validation_error(
            [rule(match={"codecs": 5}), rule(match={"codecs": "*", "languages": 3})]
        )
        fields = [issue.field for issue in error.errors]
        assert "rules[0].match.codecs" in fields
        assert "rules[1].match.languages" in fields
        assert error.message.startswith(error.errors[0].field)


class TestValidateMatch:
    """Tests for match specification validation."""

    def test_codecs_forms(self):
        """Codecs accept a list, a wildcard or a negated codec."""
        rule_set = validate(
            [
                rule(match={"codecs": ["TrueHD", "dts"]}),
                rule(match={"codecs": "*"}),
                rule(match={"codecs": "!aac"}),
            ]
        )
        kinds = [r.match.codecs.kind for r in rule_set]
        assert kinds == [
            CodecSelectorKind.ANY_OF,
            CodecSelectorKind.ALL,
            CodecSelectorKind.ALL_EXCEPT,
        ]
        assert rule_set.rules[0].match.codecs.codecs == ("truehd", "dts")
        assert rule_set.rules[2].match.codecs.codecs == ("aac",)

    @pytest.mark.parametrize("codecs", ["aac", "!", 5, None, {"aac": 1}, ["aac", 3]])
    def test_invalid_codecs(self, codecs):
        """Other codec shapes are errors."""
        error = validation_error([rule(match={"codecs": codecs})])
        assert error.field == "rules[0].match.codecs"

    def test_missing_codecs(self):
        """Codecs are required."""
        error = validation_error([rule(match={"channels": "6"})])
        assert error.field == "rules[0].match.codecs"

    def test_conditions_string_or_list(self):
        """Channel and bitrate selectors accept a string or a list."""
        rule_set = validate(
            [rule(match={"codecs": "*", "channels": ">2", "bitrate": [">=96000", "<640000"]})]
        )
        match = rule_set.rules[0].match
        assert [c.operator for c in match.channels] == [ComparisonOperator.GT]
        assert [c.value for c in match.bitrate] == [96000, 640000]

    def test_invalid_condition(self):
        """Unparseable numeric conditions are rejected at validation."""
        error = validation_error([rule(match={"codecs": "*", "channels": "lots"})])
        assert error.field == "rules[0].match.channels"
        assert "Invalid numeric condition" in error.message

    def test_languages_string_or_list(self):
        """Languages accept a string or a list."""
        rule_set = validate(
            [
                rule(match={"codecs": "*", "languages": "eng"}),
                rule(match={"codecs": "*", "languages": ["eng", "fre"]}),
            ]
        )
        assert rule_set.rules[0].match.languages == ("eng",)
        assert rule_set.rules[1].match.languages == ("eng", "fre")

    def test_match_dispositions_normalized(self):
        """Match dispositions are normalized to 0/1."""
        rule_set = validate(
            [rule(match={"codecs": "*", "dispositions": {"default": True, "comment": "0"}})]
        )
        assert rule_set.rules[0].match.dispositions == {"default": 1, "comment": 0}

    def test_match_dispositions_must_be_object(self):
        """A non-object dispositions selector is rejected."""
        error = validation_error([rule(match={"codecs": "*", "dispositions": ["default"]})])
        assert error.field == "rules[0].match.dispositions"

    def test_title_pattern(self):
        """Title needs a pattern; caseSensitive defaults to false."""
        rule_set = validate([rule(match={"codecs": "*", "title": {"pattern": "comm"}})])
        title = rule_set.rules[0].match.title
        assert title.pattern == "comm"
        assert title.case_sensitive is False

    def test_title_escaped_backslashes_normalized(self):
        """Escaped backslashes in patterns collapse to single ones."""
        rule_set = validate(
            [rule(match={"codecs": "*", "title": {"pattern": "\\\\d\\\\.\\\\d"}})]
        )
        assert rule_set.rules[0].match.title.pattern == "\\d\\.\\d"

    def test_title_requires_pattern(self):
        """A title object without a pattern is rejected."""
        error = validation_error([rule(match={"codecs": "*", "title": {"caseSensitive": True}})])
        assert error.field == "rules[0].match.title.pattern"

    def test_title_case_sensitive_must_be_bool(self):
        """caseSensitive must be a boolean."""
        error = validation_error(
            [rule(match={"codecs": "*", "title": {"pattern": "x", "caseSensitive": "yes"}})]
        )
        assert error.field == "rules[0].match.title.caseSensitive"

    def test_invalid_regex(self):
        """Patterns must compile."""
        error = validation_error([rule(match={"codecs": "*", "title": {"pattern": "("}})])
        assert "Invalid regex pattern" in error.message


class TestValidateOperations:
    """Tests for operation validation."""

    def test_copy_and_transcode(self):
        """Both operation kinds convert to runtime types."""
        rule_set = validate(
            [
                rule(
                    operations=[
                        {"copy": {}},
                        {"copy": {"title": "{title}", "dispositions": {"default": False}}},
                        {
                            "transcode": {
                                "codec": "ac3",
                                "channels": 6,
                                "bitrate": 640000,
                                "title": "AC3",
                                "dispositions": {"default": True},
                                "filters": "volume=2",
                            }
                        },
                    ]
                )
            ]
        )
        ops = rule_set.rules[0].operations
        assert ops[0] == CopyOperation()
        assert ops[1] == CopyOperation(title="{title}", dispositions={"default": False})
        assert ops[2] == TranscodeOperation(
            codec="ac3",
            channels=6,
            bitrate=640000,
            title="AC3",
            dispositions={"default": True},
            filters="volume=2",
        )

    def test_empty_operations_drop(self):
        """An empty operation list means drop."""
        assert validate([rule(operations=[])]).rules[0].drops_track is True

    @pytest.mark.parametrize(
        "operation",
        [{}, {"copy": {}, "transcode": {"codec": "aac"}}, {"copy": None}, {"remux": {}}],
    )
    def test_exactly_one_kind(self, operation):
        """An operation must carry exactly one of copy or transcode."""
        error = validation_error([rule(operations=[operation])])
        assert error.field.startswith("rules[0].operations[0]")

    def test_transcode_requires_codec(self):
        """Transcode needs a codec string."""
        error = validation_error([rule(operations=[{"transcode": {"channels": 2}}])])
        assert error.field == "rules[0].operations[0].transcode.codec"

    @pytest.mark.parametrize(
        "field,value",
        [
            ("channels", "6"),
            ("channels", -2),
            ("channels", True),
            ("bitrate", 128.5),
            ("title", 5),
            ("filters", ["volume=2"]),
            ("dispositions", {"default": 1}),
        ],
    )
    def test_transcode_field_types(self, field, value):
        """Optional transcode fields are type-checked."""
        error = validation_error(
            [rule(operations=[{"transcode": {"codec": "aac", field: value}}])]
        )
        assert error.field.startswith(f"rules[0].operations[0].transcode.{field}")

    @pytest.mark.parametrize(
        "field,value,expected",
        [
            ("channels", 6.0, 6),
            ("bitrate", 640000.0, 640000),
            ("channels", 0, None),
            ("bitrate", 0, None),
        ],
    )
    def test_transcode_count_normalization(self, field, value, expected):
        """Whole-number floats become ints and 0 inherits from the source."""
        rule_set = validate(
            [rule(operations=[{"transcode": {"codec": "aac", field: value}}])]
        )
        assert getattr(rule_set.rules[0].operations[0], field) == expected

    def test_copy_dispositions_must_be_booleans(self):
        """Copy dispositions must be real booleans."""
        error = validation_error(
            [rule(operations=[{"copy": {"dispositions": {"default": "true"}}}])]
        )
        assert error.field == "rules[0].operations[0].copy.dispositions.default"

    def test_operation_index_in_field(self):
        """Error fields name the offending operation index."""
        error = validation_error(
            [rule(), rule(operations=[{"copy": {}}, {"transcode": {"codec": ""}}])]
        )
        assert error.field == "rules[1].operations[1].transcode.codec"


class TestParseRulesText:
    """Tests for decoding rule text."""

    def test_json(self):
        """JSON text is decoded and validated."""
        rule_set = parse_rules_text(json.dumps([rule()]), format="json")
        assert len(rule_set) == 1

    def test_yaml(self):
        """YAML text is decoded and validated."""
        text = "- name: drop all\n  match:\n    codecs: '*'\n  operations: []\n"
        rule_set = parse_rules_text(text, format="yaml")
        assert rule_set.rules[0].name == "drop all"

    def test_invalid_json(self):
        """Undecodable JSON raises RuleDocumentError."""
        with pytest.raises(RuleDocumentError, match="Invalid JSON"):
            parse_rules_text("[{", format="json")

    def test_invalid_yaml(self):
        """Undecodable YAML raises RuleDocumentError."""
        with pytest.raises(RuleDocumentError, match="Invalid YAML"):
            parse_rules_text("- [unclosed", format="yaml")


class TestLoadRules:
    """Tests for loading rule files."""

    def test_json_file(self, rules_file: Path):
        """.json files are decoded as JSON."""
        rule_set = load_rules(rules_file)
        assert [r.name for r in rule_set] == [
            "Remove commentary",
            "Lossless to AC3 and AAC",
        ]

    def test_yaml_file(self, tmp_path: Path):
        """Other extensions are decoded as YAML."""
        path = tmp_path / "rules.yaml"
        path.write_text("- match: {codecs: '!aac'}\n  operations: [{copy: {}}]\n")
        assert len(load_rules(path)) == 1

    def test_missing_file(self, tmp_path: Path):
        """A missing file raises RuleDocumentError."""
        with pytest.raises(RuleDocumentError, match="not found"):
            load_rules(tmp_path / "missing.json")

    def test_directory(self, tmp_path: Path):
        """A directory raises RuleDocumentError."""
        with pytest.raises(RuleDocumentError):
            load_rules(tmp_path)


class TestRuleSetToDocument:
    """Tests for canonical document rendering."""

    def test_round_trip(self, sample_rules_document):
        """A validated document renders back to an equivalent document."""
        rule_set = validate(sample_rules_document)
        assert validate(rule_set_to_document(rule_set)) == rule_set

    def test_unset_fields_omitted(self):
        """Unset optional fields are not rendered."""
        document = rule_set_to_document(validate([rule(operations=[{"copy": {}}])]))
        assert document == [{"match": {"codecs": "*"}, "operations": [{"copy": {}}]}]

    def test_equivalent_documents_render_identically(self):
        """Equivalent spellings of a rule produce the same document."""
        a = validate([rule(match={"codecs": "*", "channels": "6", "languages": "eng"})])
        b = validate([rule(match={"codecs": "*", "channels": ["=6"], "languages": ["eng"]})])
        assert rule_set_to_document(a) == rule_set_to_document(b)
