"""Tests for candidate time decoding."""

from courtside.engine.decode import (
    candidate_list,
    decode_candidate_times,
    encode_candidate_times,
    normalize_candidate_times,
)


class TestDecodeCandidateTimes:
    def test_empty_values(self):
        assert decode_candidate_times(None) == []
        assert decode_candidate_times("") == []
        assert decode_candidate_times("   ") == []
        assert decode_candidate_times([]) == []
        assert decode_candidate_times("{}") == []
        assert decode_candidate_times("[]") == []

    def test_json_scalars_are_not_candidates(self):
        """Valid JSON that is not a list of times decodes to nothing."""
        for raw in ["null", "true", "5", "1.5", '{"a": 1}']:
            assert decode_candidate_times(raw) == []

    def test_native_list(self):
        assert decode_candidate_times(["19:00", "20:00"]) == ["19:00", "20:00"]

    def test_json_string(self):
        assert decode_candidate_times('["19:00", "20:00"]') == ["19:00", "20:00"]

    def test_braced_literal(self):
        assert decode_candidate_times('{"19:00","20:00"}') == ["19:00", "20:00"]

    def test_braced_literal_without_quotes(self):
        assert decode_candidate_times("{19:00,20:00}") == ["19:00", "20:00"]

    def test_plain_delimited(self):
        assert decode_candidate_times("19:00, 20:00") == ["19:00", "20:00"]

    def test_all_representations_agree(self):
        """The same two times decode identically from every encoding."""
        expected = ["19:00", "20:00"]
        encodings = [
            ["19:00", "20:00"],
            '["19:00","20:00"]',
            '{"19:00","20:00"}',
            "19:00,20:00",
        ]
        for raw in encodings:
            assert decode_candidate_times(raw) == expected

    def test_order_preserved(self):
        assert decode_candidate_times('{"20:00","19:00"}') == ["20:00", "19:00"]

    def test_quoting_artifacts_stripped(self):
        assert decode_candidate_times(['"19:00"', " 20:00 "]) == ["19:00", "20:00"]

    def test_empty_entries_dropped(self):
        assert decode_candidate_times('{"19:00","",""}') == ["19:00"]
        assert decode_candidate_times(["19:00", None, ""]) == ["19:00"]

    def test_double_encoded_json(self):
        assert decode_candidate_times('"[\\"19:00\\"]"') == ["19:00"]

    def test_single_time(self):
        assert decode_candidate_times("19:00") == ["19:00"]

    def test_unexpected_type(self):
        assert decode_candidate_times(42) == []
        assert decode_candidate_times({"a": 1}) == []


class TestEncodeCandidateTimes:
    def test_encodes_json(self):
        assert encode_candidate_times(["19:00", "20:00"]) == '["19:00", "20:00"]'

    def test_encoded_value_decodes(self):
        assert decode_candidate_times(encode_candidate_times(["19:00"])) == ["19:00"]


class TestNormalizeCandidateTimes:
    def test_removes_primary_time(self):
        assert normalize_candidate_times("18:00", ["18:00", "19:00"]) == ["19:00"]

    def test_removes_duplicates_and_blanks(self):
        assert normalize_candidate_times("18:00", ["19:00", "", "19:00", "20:00"]) == [
            "19:00",
            "20:00",
        ]

    def test_limits_to_two(self):
        assert normalize_candidate_times("18:00", ["19:00", "20:00", "21:00"]) == [
            "19:00",
            "20:00",
        ]

    def test_custom_limit(self):
        assert normalize_candidate_times("18:00", ["19:00", "20:00"], limit=1) == ["19:00"]

    def test_none(self):
        assert normalize_candidate_times("18:00", None) == []


class TestCandidateList:
    def test_primary_first(self):
        assert candidate_list("18:00", ["19:00", "20:00"]) == ["18:00", "19:00", "20:00"]

    def test_duplicate_of_primary_ignored(self):
        assert candidate_list("19:00", ["19:00", "20:00"]) == ["19:00", "20:00"]
