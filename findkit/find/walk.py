"""Walking directory trees and running a matcher over every entry."""

from __future__ import annotations

import os
import stat
import sys
from collections.abc import Generator, Iterable
from dataclasses import dataclass

from findkit.find.matchers.base import (
    Config,
    Dependencies,
    DirEntry,
    Matcher,
    MatcherIO,
)

WalkGenerator = Generator["DirEntry | OSError", "bool | None", None]


@dataclass
class SearchResult:
    """How many entries matched, and whether a matcher asked to stop."""

    found_count: int = 0
    quit: bool = False


def walk(root: str, config: Config | None = None) -> WalkGenerator:
    """Yield the entries under ``root`` (and ``root`` itself).

    Errors are yielded as ``OSError`` objects rather than raised, so the walk
    carries on past them. Sending a true value into the generator right after
    it yields a directory keeps the walk out of that directory.
    """
    config = config or Config()
    try:
        root_stat = os.stat(root)
    except OSError as err:
        yield err
        return
    yield from _visit(
        DirEntry(root, 0),
        stat.S_ISDIR(root_stat.st_mode),
        config,
        root_stat.st_dev,
    )


def _visit(
    entry: DirEntry, is_dir: bool, config: Config, device: int
) -> WalkGenerator:
    emit = entry.depth >= config.min_depth
    skip = False
    if emit and not config.depth_first:
        skip = bool((yield entry))

    if is_dir and not skip and entry.depth < config.max_depth:
        children = None
        try:
            if config.same_file_system and entry.depth > 0:
                if os.lstat(entry.path).st_dev != device:
                    children = []
            if children is None:
                children = _read_dir(entry.path, config.sorted_output)
        except OSError as err:
            yield err
            children = []
        for child in children:
            try:
                child_is_dir = child.is_dir(follow_symlinks=False)
            except OSError:
                child_is_dir = False
            child_entry = DirEntry(os.path.join(entry.path, child.name), entry.depth + 1)
            yield from _visit(child_entry, child_is_dir, config, device)

    if emit and config.depth_first:
        yield entry


def _read_dir(path: str, sort: bool) -> list[os.DirEntry]:
    with os.scandir(path) as it:
        children = list(it)
    if sort:
        children.sort(key=lambda child: os.fsencode(child.name))
    return children


def process_dir(
    root: str, config: Config, deps: Dependencies, matcher: Matcher
) -> SearchResult:
    """Run ``matcher`` over every entry under ``root``."""
    result = SearchResult()
    entries = walk(root, config)
    try:
        item = next(entries)
        while True:
            if isinstance(item, OSError):
                print(f"Error: {root}: {item}", file=sys.stderr)
                item = next(entries)
                continue
            matcher_io = MatcherIO(deps)
            if matcher.matches(item, matcher_io):
                result.found_count += 1
            if matcher_io.should_quit():
                result.quit = True
                break
            item = entries.send(matcher_io.should_skip_current_dir())
    except StopIteration:
        pass
    finally:
        entries.close()
    return result


def search(
    paths: Iterable[str], config: Config, deps: Dependencies, matcher: Matcher
) -> SearchResult:
    """Search each path in turn, stopping early if a matcher asks to quit."""
    total = SearchResult()
    for path in paths:
        result = process_dir(path, config, deps, matcher)
        total.found_count += result.found_count
        if result.quit:
            total.quit = True
            break
    return total