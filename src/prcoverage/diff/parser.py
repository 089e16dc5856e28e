"""Unified diff parser.

Understands ``git diff`` output (``diff --git`` sections with extended
headers) as well as plain ``diff -u`` output (``---``/``+++`` pairs only).

Hunk bodies are consumed by count: a hunk ends once the old and new line
counts from its header are exhausted, so a body line that happens to start
with ``+++`` or ``---`` is still read as an added/removed line. A hunk cut
short, or body lines past the declared counts, raise MalformedDiffError.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

import structlog

from prcoverage.core.errors import MalformedDiffError
from prcoverage.diff.models import (
    DiffHunk,
    FileDiff,
    FileStatus,
    HunkLine,
    ModifiedLineSet,
)

log = structlog.get_logger(__name__)

_HUNK_RE = re.compile(
    r"^@@ -(?P<old_start>\d+)(?:,(?P<old_count>\d+))? "
    r"\+(?P<new_start>\d+)(?:,(?P<new_count>\d+))? @@"
)
_DEV_NULL = "/dev/null"


@dataclass
class _OpenHunk:
    old_start: int
    old_count: int
    new_start: int
    new_count: int
    old_remaining: int
    new_remaining: int
    next_old: int
    next_new: int
    lines: list[HunkLine] = field(default_factory=list)

    @property
    def exhausted(self) -> bool:
        return self.old_remaining == 0 and self.new_remaining == 0

    def freeze(self) -> DiffHunk:
        return DiffHunk(
            old_start=self.old_start,
            old_count=self.old_count,
            new_start=self.new_start,
            new_count=self.new_count,
            lines=tuple(self.lines),
        )


@dataclass
class _OpenFile:
    old_path: str | None = None
    new_path: str | None = None
    status: FileStatus | None = None
    is_binary: bool = False
    seen_old_header: bool = False
    seen_new_header: bool = False
    hunks: list[DiffHunk] = field(default_factory=list)

    def freeze(self, lineno: int) -> FileDiff:
        status = self.status
        if status is None:
            if self.old_path == _DEV_NULL:
                status = "added"
            elif self.new_path == _DEV_NULL:
                status = "deleted"
            else:
                status = "modified"

        path = self.old_path if status == "deleted" else self.new_path
        if not path or path == _DEV_NULL:
            path = self.old_path if self.old_path != _DEV_NULL else None
        if not path:
            raise MalformedDiffError.at_line(lineno, "file section without a path")

        old_path = self.old_path if self.old_path not in (None, _DEV_NULL) else None
        return FileDiff(
            path=path,
            status=status,
            old_path=old_path,
            is_binary=self.is_binary,
            hunks=tuple(self.hunks),
        )


def _clean_path(raw: str) -> str:
    """Strip quoting, timestamps (``diff -u``) and the ``a/``/``b/`` prefix."""
    path = raw.split("\t", 1)[0].rstrip()
    if len(path) >= 2 and path.startswith('"') and path.endswith('"'):
        path = path[1:-1]
    if path == _DEV_NULL:
        return path
    if path.startswith(("a/", "b/")):
        path = path[2:]
    return path


def _split_git_header(rest: str) -> tuple[str | None, str | None]:
    """Split ``a/X b/Y`` from a ``diff --git`` line.

    Ambiguous with spaces in names; ``---``/``+++`` and rename headers
    take precedence when present.
    """
    idx = rest.find(" b/")
    if not rest.startswith("a/") or idx == -1:
        return None, None
    return _clean_path(rest[:idx]), _clean_path(rest[idx + 1 :])


def _split_lines(diff_text: str) -> list[str]:
    """Split on ``\\n`` only.

    ``str.splitlines`` also breaks on form feeds, ``\\x85`` and the Unicode
    line separators, which are ordinary characters inside source lines.
    """
    lines = diff_text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


class _DiffParser:
    def __init__(self) -> None:
        self.files: list[FileDiff] = []
        self.current: _OpenFile | None = None
        self.hunk: _OpenHunk | None = None
        self.skipping_binary = False

    def parse(self, diff_text: str) -> list[FileDiff]:
        lineno = 0
        for lineno, line in enumerate(_split_lines(diff_text), start=1):
            if self.hunk is not None:
                self._body_line(line, lineno)
                continue
            if self._header_line(line, lineno):
                break
        self._close_file(lineno + 1)
        return self.files

    # ------------------------------------------------------------------
    # Hunk bodies
    # ------------------------------------------------------------------

    def _body_line(self, line: str, lineno: int) -> None:
        hunk = self.hunk
        assert hunk is not None

        marker = line[:1]
        content = line[1:]
        if marker == "\\":
            # "\ No newline at end of file"
            return
        if line == "":
            # Some tools strip the single space from blank context lines
            marker = " "

        if marker == "+":
            if hunk.new_remaining == 0:
                raise MalformedDiffError.at_line(
                    lineno, "more added lines than the hunk header declares"
                )
            hunk.lines.append(HunkLine(kind="added", content=content, new_lineno=hunk.next_new))
            hunk.next_new += 1
            hunk.new_remaining -= 1
        elif marker == "-":
            if hunk.old_remaining == 0:
                raise MalformedDiffError.at_line(
                    lineno, "more removed lines than the hunk header declares"
                )
            hunk.lines.append(HunkLine(kind="removed", content=content, old_lineno=hunk.next_old))
            hunk.next_old += 1
            hunk.old_remaining -= 1
        elif marker == " ":
            if hunk.old_remaining == 0 or hunk.new_remaining == 0:
                raise MalformedDiffError.at_line(
                    lineno, "more context lines than the hunk header declares"
                )
            hunk.lines.append(
                HunkLine(
                    kind="context",
                    content=content,
                    old_lineno=hunk.next_old,
                    new_lineno=hunk.next_new,
                )
            )
            hunk.next_old += 1
            hunk.next_new += 1
            hunk.old_remaining -= 1
            hunk.new_remaining -= 1
        else:
            raise MalformedDiffError.at_line(
                lineno,
                f"hunk ended early, expected {hunk.old_remaining} old and "
                f"{hunk.new_remaining} new more lines",
            )

        if hunk.exhausted:
            self._close_hunk()

    def _close_hunk(self) -> None:
        assert self.current is not None and self.hunk is not None
        self.current.hunks.append(self.hunk.freeze())
        self.hunk = None

    # ------------------------------------------------------------------
    # File headers
    # ------------------------------------------------------------------

    def _header_line(self, line: str, lineno: int) -> bool:
        """Handle a line outside of any hunk. Returns True to stop parsing."""
        if line.startswith("diff --git "):
            self._close_file(lineno)
            old_path, new_path = _split_git_header(line[len("diff --git ") :])
            self.current = _OpenFile(old_path=old_path, new_path=new_path)
            return False

        if self.skipping_binary:
            return False

        if line.startswith("--- ") and not self._expects_new_header():
            if self.current is None or self.current.seen_old_header or self.current.hunks:
                # Plain ``diff -u`` output has no ``diff --git`` line
                self._close_file(lineno)
                self.current = _OpenFile()
            self.current.old_path = _clean_path(line[4:])
            self.current.seen_old_header = True
            return False

        if line.startswith("+++ ") and self._expects_new_header():
            assert self.current is not None
            self.current.new_path = _clean_path(line[4:])
            self.current.seen_new_header = True
            return False

        if line.startswith("@@"):
            self._open_hunk(line, lineno)
            return False

        if self.current is None:
            # Preamble (commit message, ``git format-patch`` headers)
            return False

        if line.startswith(("Binary files ", "GIT binary patch")):
            self.current.is_binary = True
            self.skipping_binary = True
        elif line.startswith("new file mode"):
            self.current.status = "added"
        elif line.startswith("deleted file mode"):
            self.current.status = "deleted"
        elif line.startswith("rename from "):
            self.current.old_path = line[len("rename from ") :]
            self.current.status = "renamed"
        elif line.startswith("rename to "):
            self.current.new_path = line[len("rename to ") :]
            self.current.status = "renamed"
        elif line.startswith("copy from "):
            self.current.old_path = line[len("copy from ") :]
            self.current.status = "copied"
        elif line.startswith("copy to "):
            self.current.new_path = line[len("copy to ") :]
            self.current.status = "copied"
        elif line == "-- ":
            # ``git format-patch`` signature separator ends the patch
            return True
        elif line[:1] in ("+", "-", " ") and self.current.hunks:
            raise MalformedDiffError.at_line(
                lineno, "body line outside of a hunk; hunk header counts too small"
            )
        return False

    def _expects_new_header(self) -> bool:
        return (
            self.current is not None
            and self.current.seen_old_header
            and not self.current.seen_new_header
        )

    def _open_hunk(self, line: str, lineno: int) -> None:
        if self.current is None:
            raise MalformedDiffError.at_line(lineno, "hunk header outside of a file section")
        match = _HUNK_RE.match(line)
        if not match:
            raise MalformedDiffError.at_line(lineno, f"unparseable hunk header: {line!r}")

        old_start = int(match.group("old_start"))
        old_count = int(match.group("old_count") or 1)
        new_start = int(match.group("new_start"))
        new_count = int(match.group("new_count") or 1)

        if self.current.hunks and new_start < self.current.hunks[-1].new_end:
            raise MalformedDiffError.at_line(
                lineno,
                f"hunk starting at new line {new_start} overlaps the previous hunk",
            )

        self.hunk = _OpenHunk(
            old_start=old_start,
            old_count=old_count,
            new_start=new_start,
            new_count=new_count,
            old_remaining=old_count,
            new_remaining=new_count,
            next_old=old_start,
            next_new=new_start,
        )
        if self.hunk.exhausted:
            self._close_hunk()

    def _close_file(self, lineno: int) -> None:
        if self.hunk is not None:
            raise MalformedDiffError.at_line(
                lineno,
                f"hunk ended early, expected {self.hunk.old_remaining} old and "
                f"{self.hunk.new_remaining} new more lines",
            )
        if self.current is not None:
            self.files.append(self.current.freeze(lineno))
        self.current = None
        self.skipping_binary = False


def parse_file_diffs(diff_text: str) -> list[FileDiff]:
    """Parse unified diff text into per-file sections.

    Raises:
        MalformedDiffError: On unparseable hunk headers or hunk bodies whose
            length disagrees with the header.
    """
    return _DiffParser().parse(diff_text)


def parse_diff(diff_text: str) -> ModifiedLineSet:
    """Parse unified diff text into the set of added new-file lines per file.

    Binary and deleted files are left out. Renamed or copied files without
    line changes are present with an empty set.
    """
    file_diffs = parse_file_diffs(diff_text)
    modified = ModifiedLineSet.from_file_diffs(file_diffs)
    log.debug(
        "diff_parsed",
        files=len(file_diffs),
        touched=len(modified),
        added_lines=modified.total_lines,
        binary=sum(1 for f in file_diffs if f.is_binary),
    )
    return modified
