"""Line-based diffs between version contents.

Diffs are unified diffs (as produced by ``difflib.unified_diff``) with the
``\\ No newline at end of file`` marker added wherever a line lacks its
terminator, so ``apply_diff(old, compute_diff(old, new)) == new`` holds for
any pair of strings. ``apply_diff(new, diff, reverse=True)`` walks back.

Only ``\\n`` separates lines; ``\\r`` and other characters that
``str.splitlines`` would break on stay inside the line.
"""

import difflib
import re
from typing import List

from ..exceptions import ValidationError

DIFF_CONTEXT_LINES = 3

_NO_NEWLINE_MARKER = "\\ No newline at end of file\n"
_HUNK_HEADER = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")


def split_lines(text: str) -> List[str]:
    """Split on ``\\n`` only, keeping the terminators."""
    if not text:
        return []
    parts = text.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def compute_diff(old: str, new: str, from_label: str = "previous", to_label: str = "current") -> str:
    """Unified diff turning ``old`` into ``new``. Empty when they are equal."""
    out: List[str] = []
    for line in difflib.unified_diff(
        split_lines(old), split_lines(new),
        fromfile=from_label, tofile=to_label, n=DIFF_CONTEXT_LINES,
    ):
        if line.endswith("\n"):
            out.append(line)
        else:
            out.append(line + "\n")
            out.append(_NO_NEWLINE_MARKER)
    return "".join(out)


def _malformed(message: str) -> ValidationError:
    return ValidationError(f"Cannot apply diff: {message}", field="diff")


def apply_diff(source: str, diff: str, reverse: bool = False) -> str:
    """Apply a diff from ``compute_diff`` to ``source``.

    Args:
        source: Text the diff was computed from (or, with ``reverse``, to).
        diff: Unified diff text.
        reverse: Undo the diff instead of applying it.

    Raises:
        ValidationError: If the diff is malformed or does not match ``source``.
    """
    if not diff:
        return source

    src = split_lines(source)
    lines = split_lines(diff)
    result: List[str] = []
    pos = 0
    i = 0

    while i < len(lines):
        header = _HUNK_HEADER.match(lines[i])
        if header is None:
            # File headers only appear outside hunk bodies.
            if lines[i].startswith(("--- ", "+++ ")):
                i += 1
                continue
            raise _malformed(f"unexpected line {i + 1}")

        old_start = int(header.group(1))
        old_len = int(header.group(2)) if header.group(2) is not None else 1
        new_start = int(header.group(3))
        new_len = int(header.group(4)) if header.group(4) is not None else 1
        if reverse:
            old_start, old_len, new_start, new_len = new_start, new_len, old_start, old_len
        i += 1

        # An empty range names the line *before* the insertion point.
        start = old_start - 1 if old_len else old_start
        if start < pos or start > len(src):
            raise _malformed(f"hunk at line {old_start} out of range")
        result.extend(src[pos:start])
        pos = start

        old_left, new_left = old_len, new_len
        while old_left > 0 or new_left > 0:
            if i >= len(lines):
                raise _malformed("truncated hunk")
            body = lines[i]
            i += 1
            tag, text = body[:1], body[1:]
            if i < len(lines) and lines[i] == _NO_NEWLINE_MARKER:
                i += 1
                if text.endswith("\n"):
                    text = text[:-1]
            if reverse and tag in ("+", "-"):
                tag = "-" if tag == "+" else "+"

            if tag in (" ", "-"):
                if pos >= len(src) or src[pos] != text:
                    raise _malformed(f"context mismatch at line {pos + 1}")
                pos += 1
                old_left -= 1
                if tag == " ":
                    result.append(text)
                    new_left -= 1
            elif tag == "+":
                result.append(text)
                new_left -= 1
            else:
                raise _malformed(f"unexpected line {i}")

            if old_left < 0 or new_left < 0:
                raise _malformed("hunk longer than its header")

    result.extend(src[pos:])
    return "".join(result)
