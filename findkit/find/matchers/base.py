"""Core types shared by the search, the directory walker and the matchers."""

from __future__ import annotations

import os
import sys
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TextIO


@dataclass
class Config:
    """Settings that control how a search walks the file tree."""

    same_file_system: bool = False
    depth_first: bool = False
    min_depth: int = 0
    max_depth: int = sys.maxsize
    sorted_output: bool = False
    help_requested: bool = False
    version_requested: bool = False


class Dependencies:
    """The output stream and clock a search uses.

    Times are seconds since the epoch, as returned by ``time.time()``.
    """

    def __init__(self, output: TextIO, now: float | None = None) -> None:
        self.output = output
        self._now = time.time() if now is None else now

    def now(self) -> float:
        """Return the time the search treats as the present."""
        return self._now


class StandardDependencies(Dependencies):
    """Dependencies for a real run: standard output and the current time."""

    def __init__(self) -> None:
        super().__init__(sys.stdout)

    def now(self) -> float:
        return self._now


@dataclass(frozen=True)
class ComparableValue:
    """A numeric test of the form ``+N``, ``N`` or ``-N``."""

    class Kind(Enum):
        MORE_THAN = "+"
        EQUAL_TO = "="
        LESS_THAN = "-"

    kind: ComparableValue.Kind
    value: int

    def matches(self, value: int) -> bool:
        """Compare a non-negative quantity with the limit."""
        if value < 0:
            raise ValueError(f"value must not be negative: {value}")
        if self.kind is self.Kind.MORE_THAN:
            return value > self.value
        if self.kind is self.Kind.EQUAL_TO:
            return value == self.value
        return value < self.value

    def imatches(self, value: int) -> bool:
        """Compare a quantity that may be negative with the limit."""
        if value < 0:
            return self.kind is self.Kind.LESS_THAN
        return self.matches(value)


@dataclass(frozen=True)
class DirEntry:
    """A file found while walking a tree, with its depth below the root."""

    path: str
    depth: int = 0
    follow_link: bool = False

    @property
    def file_name(self) -> str:
        separators = os.sep + (os.altsep or "")
        name = os.path.basename(self.path.rstrip(separators))
        return name or self.path

    def metadata(self) -> os.stat_result:
        """Stat the entry, following a symlink only if ``follow_link`` is set."""
        if self.follow_link:
            return os.stat(self.path)
        return os.lstat(self.path)

    def symlink_metadata(self) -> os.stat_result:
        """Stat the entry itself, never following a symlink."""
        return os.lstat(self.path)


class MatcherIO:
    """Per-entry channel between a matcher and the walk that drives it."""

    def __init__(self, deps: Dependencies) -> None:
        self.deps = deps
        self._quit = False
        self._skip_current_dir = False

    def quit(self) -> None:
        self._quit = True

    def should_quit(self) -> bool:
        return self._quit

    def mark_current_dir_to_be_skipped(self) -> None:
        self._skip_current_dir = True

    def should_skip_current_dir(self) -> bool:
        return self._skip_current_dir

    def now(self) -> float:
        return self.deps.now()


class Matcher(ABC):
    """A test applied to every entry found by a search."""

    @abstractmethod
    def matches(self, entry: DirEntry, matcher_io: MatcherIO) -> bool:
        """Return whether the entry matches."""