"""Tests for disposition flag encoding."""

from trackrules.rules.dispositions import encode_dispositions


class TestEncodeDispositions:
    """Tests for encode_dispositions."""

    def test_single_true_flag_is_bare(self):
        """A lone enabled flag is written bare."""
        assert encode_dispositions({"default": True}) == "default"

    def test_later_true_flags_prefixed(self):
        """Enabled flags after the first get a + prefix."""
        assert encode_dispositions({"default": True, "dub": True}) == "default+dub"

    def test_false_flags_prefixed(self):
        """Disabled flags get a - prefix."""
        assert encode_dispositions({"default": False}) == "-default"
        assert (
            encode_dispositions({"default": True, "comment": False})
            == "default-comment"
        )

    def test_true_flag_after_false_is_prefixed(self):
        """Only a true flag in first position is bare."""
        assert encode_dispositions({"comment": False, "default": True}) == "-comment+default"

    def test_insertion_order_preserved(self):
        """Flags are emitted in insertion order, not sorted."""
        flags = {"visual_impaired": True, "comment": False, "default": True}
        assert encode_dispositions(flags) == "visual_impaired-comment+default"

    def test_empty_mapping(self):
        """No flags encode to an empty string."""
        assert encode_dispositions({}) == ""
