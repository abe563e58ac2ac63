# =============================================================================
# Unit Tests — Response Parser
# =============================================================================
#
# parse_response() must never raise; metadata is best-effort.
# =============================================================================

from __future__ import annotations

import pytest

from app.exceptions import MetadataParseError
from app.services.response_parser import (
    ParsedReply,
    decode_meta_line,
    is_meta_line,
    parse_response,
)


class TestIsMetaLine:
    """Sentinel detection."""

    def test_plain_prefix(self):
        assert is_meta_line('META: {"a": 1}')

    def test_case_insensitive(self):
        assert is_meta_line('meta: {"a": 1}')
        assert is_meta_line('Meta:{}')

    def test_leading_whitespace_ignored(self):
        assert is_meta_line('   META: {}')

    def test_prefix_must_start_the_line(self):
        assert not is_meta_line("The META: line is below")

    def test_ordinary_text(self):
        assert not is_meta_line("Hello there.")
        assert not is_meta_line("")


class TestDecodeMetaLine:
    """JSON decoding of the sentinel payload."""

    def test_object_decoded(self):
        assert decode_meta_line('META: {"emotion":"happy"}') == {"emotion": "happy"}

    def test_invalid_json_raises(self):
        with pytest.raises(MetadataParseError):
            decode_meta_line("META: not-json")

    def test_non_object_raises(self):
        with pytest.raises(MetadataParseError, match="list"):
            decode_meta_line("META: [1, 2]")

    def test_empty_payload_raises(self):
        with pytest.raises(MetadataParseError):
            decode_meta_line("META:")


class TestParseResponse:
    """Reply / metadata split."""

    def test_reply_and_meta_split(self):
        raw = 'Hi there.\nMETA: {"emotion":"happy","tone":"upbeat"}'
        result = parse_response(raw)
        assert result == ParsedReply(
            reply="Hi there.", meta={"emotion": "happy", "tone": "upbeat"},
        )

    def test_no_meta_line(self):
        raw = "  Just a reply.\nWith two lines.  \n"
        result = parse_response(raw)
        assert result.meta == {}
        assert result.reply == "Just a reply.\nWith two lines."

    def test_invalid_json_gives_empty_meta_and_strips_line(self):
        result = parse_response("Hello.\nMETA: not-json")
        assert result.meta == {}
        assert result.reply == "Hello."

    def test_non_object_meta_gives_empty_meta(self):
        result = parse_response('Hello.\nMETA: "happy"')
        assert result.meta == {}
        assert result.reply == "Hello."

    def test_only_first_meta_line_decoded(self):
        raw = 'Hi.\nMETA: {"emotion":"sad"}\nMETA: {"emotion":"happy"}'
        assert parse_response(raw).meta == {"emotion": "sad"}

    def test_first_meta_invalid_later_valid_still_empty(self):
        raw = 'Hi.\nMETA: oops\nMETA: {"emotion":"happy"}'
        result = parse_response(raw)
        assert result.meta == {}
        assert result.reply == "Hi."

    def test_mid_reply_meta_line_also_stripped(self):
        raw = 'First.\nmeta: {"tone":"dry"}\nSecond.'
        result = parse_response(raw)
        assert result.reply == "First.\nSecond."
        assert result.meta == {"tone": "dry"}

    def test_indented_meta_line(self):
        raw = 'Reply\n   META: {"emotion":"calm"}   '
        result = parse_response(raw)
        assert result.reply == "Reply"
        assert result.meta == {"emotion": "calm"}

    def test_empty_input(self):
        assert parse_response("") == ParsedReply(reply="", meta={})

    def test_none_input(self):
        assert parse_response(None) == ParsedReply(reply="", meta={})

    def test_only_meta_line(self):
        result = parse_response('META: {"emotion":"neutral"}')
        assert result.reply == ""
        assert result.meta == {"emotion": "neutral"}

    def test_deeply_nested_json_does_not_raise(self):
        raw = "Hi\nMETA: " + "[" * 100_000 + "]" * 100_000
        assert parse_response(raw).meta == {}

    def test_internal_blank_lines_preserved(self):
        raw = 'Para one.\n\nPara two.\nMETA: {}'
        assert parse_response(raw).reply == "Para one.\n\nPara two."
