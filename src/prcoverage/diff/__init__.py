"""Unified diff parsing into added-line sets."""

from prcoverage.diff.models import (
    DiffHunk,
    FileDiff,
    HunkLine,
    ModifiedLineSet,
)
from prcoverage.diff.parser import parse_diff, parse_file_diffs

__all__ = [
    "DiffHunk",
    "FileDiff",
    "HunkLine",
    "ModifiedLineSet",
    "parse_diff",
    "parse_file_diffs",
]
