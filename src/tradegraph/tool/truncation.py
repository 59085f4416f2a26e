"""Output truncation: bound tool output before it reaches the model."""

from __future__ import annotations

MAX_LINES = 400
MAX_BYTES = 16 * 1024  # 16KB


def truncate_output(
    text: str,
    max_lines: int = MAX_LINES,
    max_bytes: int = MAX_BYTES,
) -> str:
    """Truncate tool output to fit within the prompt budget.

    The head is dropped and the tail kept. Tool payloads are single-line
    JSON, so a payload over ``max_bytes`` loses its opening and is no
    longer valid JSON; the notice line reports how much was cut.

    Args:
        text: Raw tool output.
        max_lines: Maximum number of lines to keep.
        max_bytes: Maximum bytes to keep.

    Returns:
        The text unchanged when within limits, otherwise a notice line
        followed by the kept tail.
    """
    if not text:
        return text

    lines = text.split("\n")
    byte_count = len(text.encode("utf-8", errors="replace"))

    if len(lines) <= max_lines and byte_count <= max_bytes:
        return text

    kept = lines[-max_lines:]
    skipped = len(lines) - len(kept)

    result = "\n".join(kept)
    result_bytes = result.encode("utf-8", errors="replace")
    skipped_bytes = 0
    if len(result_bytes) > max_bytes:
        # Cut at a safe UTF-8 boundary, keeping the tail
        result = result_bytes[-max_bytes:].decode("utf-8", errors="ignore")
        skipped_bytes = len(result_bytes) - max_bytes

    notice_parts = []
    if skipped > 0:
        notice_parts.append(f"{skipped} lines skipped")
    if skipped_bytes > 0:
        notice_parts.append(f"{skipped_bytes} bytes skipped")

    notice = (
        f"[Output truncated: {', '.join(notice_parts)}. "
        f"Total: {len(lines)} lines, {byte_count} bytes]"
    )
    return f"{notice}\n{result}"
