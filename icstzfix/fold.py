"""Line folding, unfolding and splitting for iCalendar content lines."""

from __future__ import annotations

FIRST_LINE_WIDTH = 75
CONTINUATION_WIDTH = 74
_FOLD_WHITESPACE = " \t"


def fold_line(line: str) -> list[str]:
    """Split a content line into physical lines of at most 75 characters.

    Continuation lines begin with a single space, followed by up to 74
    characters of the original line.
    """
    if len(line) <= FIRST_LINE_WIDTH:
        return [line]

    chunks = [line[:FIRST_LINE_WIDTH]]
    remaining = line[FIRST_LINE_WIDTH:]
    chunks.extend(
        " " + remaining[start:start + CONTINUATION_WIDTH]
        for start in range(0, len(remaining), CONTINUATION_WIDTH)
    )
    return chunks


def unfold_lines(content: str) -> list[str]:
    """Join folded continuation lines back onto the line they belong to."""
    unfolded: list[str] = []
    for line in content.replace("\r\n", "\n").split("\n"):
        if line[:1] in (" ", "\t") and line:
            continuation = line.lstrip(_FOLD_WHITESPACE)
            if unfolded:
                unfolded[-1] += continuation
            else:
                unfolded.append(continuation)
            continue
        unfolded.append(line)
    return unfolded


def split_line(line: str) -> tuple[str, str] | None:
    """Split a content line at its first colon into name part and value.

    Returns ``None`` when the line holds no colon.
    """
    key, sep, value = line.partition(":")
    if not sep:
        return None
    return key, value