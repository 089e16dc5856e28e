"""Data models for parsed unified diffs.

All models are frozen dataclasses; a parsed diff is never mutated.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Literal

LineKind = Literal["context", "added", "removed"]
FileStatus = Literal["added", "modified", "deleted", "renamed", "copied"]


@dataclass(frozen=True, slots=True)
class HunkLine:
    """One body line of a hunk.

    Only added and context lines carry a new-file line number; removed
    lines exist in old-file numbering only.
    """

    kind: LineKind
    content: str
    old_lineno: int | None = None
    new_lineno: int | None = None


@dataclass(frozen=True, slots=True)
class DiffHunk:
    """A single ``@@ -a,b +c,d @@`` block."""

    old_start: int
    old_count: int
    new_start: int
    new_count: int
    lines: tuple[HunkLine, ...] = ()

    @property
    def added_lines(self) -> tuple[int, ...]:
        """New-file line numbers of added lines, ascending."""
        return tuple(
            ln.new_lineno for ln in self.lines if ln.kind == "added" and ln.new_lineno is not None
        )

    @property
    def new_end(self) -> int:
        """First new-file line number after this hunk."""
        return self.new_start + self.new_count


@dataclass(frozen=True, slots=True)
class FileDiff:
    """One file section of a diff."""

    path: str  # new path, or old path for deletions
    status: FileStatus
    old_path: str | None = None
    is_binary: bool = False
    hunks: tuple[DiffHunk, ...] = ()

    @property
    def added_lines(self) -> tuple[int, ...]:
        return tuple(line for hunk in self.hunks for line in hunk.added_lines)

    @property
    def contributes_lines(self) -> bool:
        """Whether this file has a place in the modified-line set."""
        return not self.is_binary and self.status != "deleted"


@dataclass(frozen=True)
class ModifiedLineSet:
    """Read-only mapping: file path → new-file line numbers the diff added.

    A renamed, copied or otherwise touched file without added lines is
    present with an empty set.
    """

    files: Mapping[str, frozenset[int]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        frozen = {path: frozenset(lines) for path, lines in self.files.items()}
        object.__setattr__(self, "files", MappingProxyType(frozen))

    @classmethod
    def from_file_diffs(cls, file_diffs: Iterable[FileDiff]) -> ModifiedLineSet:
        files: dict[str, set[int]] = {}
        for file_diff in file_diffs:
            if not file_diff.contributes_lines:
                continue
            files.setdefault(file_diff.path, set()).update(file_diff.added_lines)
        return cls(files={path: frozenset(lines) for path, lines in files.items()})

    def lines_for(self, path: str) -> frozenset[int]:
        return self.files.get(path, frozenset())

    @property
    def total_lines(self) -> int:
        return sum(len(lines) for lines in self.files.values())

    def __contains__(self, path: object) -> bool:
        return path in self.files

    def __iter__(self) -> Iterator[str]:
        return iter(self.files)

    def __len__(self) -> int:
        return len(self.files)
