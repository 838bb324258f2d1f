"""A matcher that ends the search."""

from __future__ import annotations

from findkit.find.matchers.base import DirEntry, Matcher, MatcherIO


class QuitMatcher(Matcher):
    """Always matches, and tells the search to stop immediately."""

    def matches(self, entry: DirEntry, matcher_io: MatcherIO) -> bool:
        matcher_io.quit()
        return True