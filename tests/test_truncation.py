"""Tests for tradegraph.tool.truncation."""

from __future__ import annotations

import json

import pytest

from tradegraph.tool.truncation import MAX_BYTES, MAX_LINES, truncate_output


# ---------------------------------------------------------------------------
# truncate_output
# ---------------------------------------------------------------------------


class TestTruncateOutput:
    def test_empty_string(self) -> None:
        assert truncate_output("") == ""

    def test_within_limits(self) -> None:
        text = '{"symbol": "TSLA", "rsi_14": 55.2}'
        assert truncate_output(text) == text

    def test_exactly_at_line_limit(self) -> None:
        text = "\n".join("x" for _ in range(MAX_LINES))
        assert truncate_output(text) == text

    def test_over_line_limit_keeps_tail(self) -> None:
        lines = [f"line {i}" for i in range(MAX_LINES + 500)]
        result = truncate_output("\n".join(lines))
        notice, _, body = result.partition("\n")
        assert notice.startswith("[Output truncated: 500 lines skipped.")
        assert f"Total: {MAX_LINES + 500} lines" in notice
        assert body.split("\n")[0] == "line 500"
        assert body.endswith(f"line {MAX_LINES + 499}")

    def test_over_byte_limit(self) -> None:
        text = "x" * (MAX_BYTES + 1000)
        result = truncate_output(text)
        notice, _, body = result.partition("\n")
        assert "1000 bytes skipped" in notice
        assert len(body.encode()) == MAX_BYTES

    def test_single_line_json_keeps_tail(self) -> None:
        payload = json.dumps({"items": ["headline"] * 3000, "symbol": "TSLA"})
        result = truncate_output(payload, max_bytes=200)
        notice, _, body = result.partition("\n")
        assert notice.startswith("[Output truncated:")
        assert f"{len(payload) - 200} bytes skipped" in notice
        assert body == payload[-200:]
        assert body.endswith('"symbol": "TSLA"}')
        with pytest.raises(json.JSONDecodeError):
            json.loads(body)

    def test_multibyte_boundary(self) -> None:
        text = "é" * MAX_BYTES
        result = truncate_output(text)
        _, _, body = result.partition("\n")
        assert set(body) == {"é"}
        assert len(body.encode()) <= MAX_BYTES

    def test_custom_limits(self) -> None:
        result = truncate_output("a\nb\nc\nd", max_lines=2)
        assert result.endswith("c\nd")
        assert "2 lines skipped" in result
