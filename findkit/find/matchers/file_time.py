"""Matching files by their access, creation and modification times."""

from __future__ import annotations

import os
import sys
from enum import Enum

from findkit.find.matchers.base import ComparableValue, DirEntry, Matcher, MatcherIO

SECONDS_PER_DAY = 60 * 60 * 24


class NewerMatcher(Matcher):
    """Matches files modified more recently than a reference file."""

    def __init__(self, path_to_file: str) -> None:
        self.given_modification_time = os.stat(path_to_file).st_mtime_ns

    def matches(self, entry: DirEntry, matcher_io: MatcherIO) -> bool:
        try:
            this_time = entry.metadata().st_mtime_ns
        except OSError as err:
            print(
                f"Error getting modification time for {entry.path}: {err}",
                file=sys.stderr,
            )
            return False
        return this_time > self.given_modification_time


class FileTimeType(Enum):
    """Which of a file's timestamps to look at."""

    ACCESSED = "Accessed"
    CREATED = "Created"
    MODIFIED = "Modified"

    def get_file_time(self, metadata: os.stat_result) -> float:
        """Return this timestamp from ``metadata``, in seconds since the epoch."""
        if self is FileTimeType.ACCESSED:
            return metadata.st_atime
        if self is FileTimeType.MODIFIED:
            return metadata.st_mtime
        birth_time = getattr(metadata, "st_birthtime", None)
        if birth_time is not None:
            return birth_time
        if os.name == "nt":
            return metadata.st_ctime
        raise OSError("creation time is not available on this platform currently")


def _age_in_days(now: float, file_time: float) -> int:
    delta = now - file_time
    if delta >= 0:
        return int(delta) // SECONDS_PER_DAY
    # A file even a moment in the future counts as -1 day old, not 0.
    return -(int(-delta) // SECONDS_PER_DAY) - 1


class FileTimeMatcher(Matcher):
    """Matches files whose chosen timestamp is less than, exactly or more than N days old."""

    def __init__(self, file_time_type: FileTimeType, days: ComparableValue) -> None:
        self.file_time_type = file_time_type
        self.days = days

    def matches(self, entry: DirEntry, matcher_io: MatcherIO) -> bool:
        try:
            file_time = self.file_time_type.get_file_time(entry.metadata())
        except OSError as err:
            print(
                f"Error getting {self.file_time_type.value} time for {entry.path}: {err}",
                file=sys.stderr,
            )
            return False
        return self.days.imatches(_age_in_days(matcher_io.now(), file_time))