"""Matching files by inode number and link count."""

from __future__ import annotations

import os

from findkit.find.matchers.base import ComparableValue, DirEntry, Matcher, MatcherIO

_HAS_INODES = os.name == "posix"


class InodeMatcher(Matcher):
    """Matches files by inode number."""

    def __init__(self, ino: ComparableValue) -> None:
        if not _HAS_INODES:
            raise OSError("Inode numbers are not available on this platform")
        self.ino = ino

    def matches(self, entry: DirEntry, matcher_io: MatcherIO) -> bool:
        try:
            return self.ino.matches(entry.metadata().st_ino)
        except OSError:
            return False


class LinksMatcher(Matcher):
    """Matches files by hard link count."""

    def __init__(self, nlink: ComparableValue) -> None:
        if not _HAS_INODES:
            raise OSError("Link counts are not available on this platform")
        self.nlink = nlink

    def matches(self, entry: DirEntry, matcher_io: MatcherIO) -> bool:
        try:
            return self.nlink.matches(entry.metadata().st_nlink)
        except OSError:
            return False