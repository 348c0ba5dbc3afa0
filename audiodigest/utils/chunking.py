"""Line-atomic transcript chunking."""

from __future__ import annotations

from collections.abc import Iterator


def iter_chunks(text: str, max_chars: int) -> Iterator[str]:
    """Yield contiguous runs of whole lines, each at most `max_chars` long.

    A line longer than `max_chars` is yielded on its own; lines are never split.
    `"\\n".join(chunks)` reproduces `text`, except that a single trailing
    newline is dropped.
    """
    if max_chars <= 0:
        raise ValueError("max_chars must be > 0")

    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()

    current: list[str] = []
    size = 0
    for line in lines:
        if current and size + 1 + len(line) > max_chars:
            yield "\n".join(current)
            current, size = [], 0

        if not current and len(line) > max_chars:
            yield line
            continue

        size = size + 1 + len(line) if current else len(line)
        current.append(line)

    if current:
        yield "\n".join(current)


def split_transcript(text: str, max_chars: int) -> list[str]:
    return list(iter_chunks(text, max_chars))
