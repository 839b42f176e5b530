"""Unified-diff helpers for anchoring review comments on new-file lines."""

from __future__ import annotations

import re
from dataclasses import dataclass

_HUNK_HEADER_RE = re.compile(r"^@@ -\d+(?:,\d+)? \+(\d+)(?:,(\d+))? @@")


@dataclass(frozen=True)
class Hunk:
    """New-file line range covered by one hunk, plus its raw text."""

    start_line: int
    end_line: int
    text: str

    def contains(self, start_line: int, end_line: int) -> bool:
        return self.start_line <= start_line <= end_line <= self.end_line


def parse_hunks(patch_text: str) -> list[Hunk]:
    """Split a file patch into hunks with their new-file line ranges.

    Pure deletions (``+N,0``) cover no new-file lines and are dropped, since
    nothing can be anchored on them.
    """
    hunks: list[Hunk] = []
    current: list[str] = []
    header: tuple[int, int] | None = None

    def flush():
        if header is not None and header[1] > 0:
            start, count = header
            hunks.append(Hunk(start_line=start, end_line=start + count - 1, text="\n".join(current)))

    for line in patch_text.splitlines():
        match = _HUNK_HEADER_RE.match(line)
        if match:
            flush()
            start = int(match.group(1))
            count = int(match.group(2)) if match.group(2) is not None else 1
            header = (start, count)
            current = [line]
            continue
        if header is not None:
            current.append(line)
    flush()
    return hunks


def hunk_for_range(hunks: list[Hunk], start_line: int, end_line: int) -> Hunk | None:
    for hunk in hunks:
        if hunk.contains(start_line, end_line):
            return hunk
    return None


def number_new_lines(hunk: Hunk) -> str:
    """Prefix every new-file line of ``hunk`` with its line number.

    Removed lines keep their "-" marker without a number so the model can
    see what was deleted but never anchors a comment on it.
    """
    out: list[str] = []
    file_line = hunk.start_line
    for line in hunk.text.splitlines()[1:]:
        if line.startswith("-"):
            out.append(f"     {line}")
            continue
        if line.startswith("\\"):
            continue
        out.append(f"{file_line:>4} {line}")
        file_line += 1
    return "\n".join(out)
