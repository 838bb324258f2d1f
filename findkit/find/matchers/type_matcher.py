"""Matching files by type."""

from __future__ import annotations

import os
import stat
from collections.abc import Callable

from findkit.find.matchers.base import DirEntry, Matcher, MatcherIO

_COMMON_TYPES: dict[str, Callable[[int], bool]] = {
    "f": stat.S_ISREG,
    "d": stat.S_ISDIR,
    "l": stat.S_ISLNK,
}

_UNIX_TYPES: dict[str, Callable[[int], bool]] = {
    "b": stat.S_ISBLK,
    "c": stat.S_ISCHR,
    "p": stat.S_ISFIFO,
    "s": stat.S_ISSOCK,
}


def _supported_types() -> dict[str, Callable[[int], bool]]:
    if os.name == "posix":
        return {**_COMMON_TYPES, **_UNIX_TYPES}
    return dict(_COMMON_TYPES)


class TypeMatcher(Matcher):
    """Matches files of one type: f, d, l and, on Unix, b, c, p or s."""

    def __init__(self, type_string: str) -> None:
        if os.name == "posix" and type_string == "D":
            raise ValueError(f"Type argument {type_string} not supported yet")
        try:
            self._test = _supported_types()[type_string]
        except KeyError:
            raise ValueError(f"Unrecognised type argument {type_string}") from None
        self.type_string = type_string

    def matches(self, entry: DirEntry, matcher_io: MatcherIO) -> bool:
        try:
            mode = entry.metadata().st_mode
        except OSError:
            return False
        return self._test(mode)