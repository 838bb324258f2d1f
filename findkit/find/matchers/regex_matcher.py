"""Matching whole paths against regular expressions of several dialects."""

from __future__ import annotations

import re
import string
from dataclasses import dataclass
from enum import Enum

from findkit.find.matchers.base import DirEntry, Matcher, MatcherIO


class RegexType(Enum):
    """A regular expression dialect. ``EMACS`` is the default."""

    EMACS = "emacs"
    GREP = "grep"
    POSIX_BASIC = "posix-basic"
    POSIX_EXTENDED = "posix-extended"

    def __str__(self) -> str:
        return self.value


class InvalidRegexTypeError(ValueError):
    """Raised for an unknown ``-regextype`` name."""

    def __init__(self, name: str) -> None:
        self.name = name
        choices = ", ".join(f"'{kind}'" for kind in RegexType)
        super().__init__(f"Invalid regex type: {name} (must be one of {choices})")


_ALIASES = {"ed": RegexType.POSIX_BASIC, "sed": RegexType.POSIX_BASIC}


def parse_regex_type(name: str) -> RegexType:
    """Return the dialect called ``name``; ``ed`` and ``sed`` mean posix-basic."""
    try:
        return RegexType(name)
    except ValueError:
        pass
    try:
        return _ALIASES[name]
    except KeyError:
        raise InvalidRegexTypeError(name) from None


@dataclass(frozen=True)
class _Syntax:
    plain_ops: frozenset[str]
    escaped_ops: frozenset[str]
    context_anchors: bool
    emacs_escapes: bool = False


_SYNTAXES = {
    RegexType.EMACS: _Syntax(
        frozenset(".*+?^$"), frozenset("()|{}"), True, emacs_escapes=True
    ),
    RegexType.GREP: _Syntax(frozenset(".*^$"), frozenset("()|{}+?"), True),
    RegexType.POSIX_BASIC: _Syntax(frozenset(".*^$"), frozenset("(){}"), True),
    RegexType.POSIX_EXTENDED: _Syntax(frozenset(".*+?^$()|{}"), frozenset(), False),
}

_EMACS_ESCAPES = {"<": r"\b", ">": r"\b", "`": r"\A", "'": r"\Z"}

_POSIX_CLASSES = {
    "alpha": "a-zA-Z",
    "digit": "0-9",
    "alnum": "a-zA-Z0-9",
    "upper": "A-Z",
    "lower": "a-z",
    "space": r" \t\n\r\f\v",
    "blank": r" \t",
    "punct": "".join("\\" + c for c in string.punctuation),
    "xdigit": "0-9A-Fa-f",
    "cntrl": r"\x00-\x1f\x7f",
    "print": r"\x20-\x7e",
    "graph": r"\x21-\x7e",
    "word": r"\w",
}


def _translate_bracket(pattern: str, pos: int) -> tuple[str, int]:
    """Translate the bracket expression starting at ``pos``; return it and the end."""
    out = ["["]
    pos += 1
    if pattern.startswith("^", pos):
        out.append("^")
        pos += 1
    if pattern.startswith("]", pos):
        out.append(r"\]")
        pos += 1
    while pos < len(pattern):
        char = pattern[pos]
        if char == "]":
            out.append("]")
            return "".join(out), pos + 1
        if char == "[" and pattern[pos + 1 : pos + 2] in (":", ".", "="):
            kind = pattern[pos + 1]
            end = pattern.find(kind + "]", pos + 2)
            if end < 0:
                raise ValueError(f"Unterminated [{kind} in pattern: {pattern}")
            name = pattern[pos + 2 : end]
            if kind == ":":
                try:
                    out.append(_POSIX_CLASSES[name])
                except KeyError:
                    raise ValueError(f"Invalid character class: {name}") from None
            else:
                out.append(re.escape(name))
            pos = end + 2
            continue
        out.append("\\" + char if char in "\\[&~|" else char)
        pos += 1
    raise ValueError(f"Unmatched [ in pattern: {pattern}")


def translate_pattern(pattern: str, regex_type: RegexType = RegexType.EMACS) -> str:
    """Rewrite ``pattern`` in the given dialect as a Python regular expression."""
    syntax = _SYNTAXES[regex_type]
    out: list[str] = []
    expect_atom = True
    pos = 0
    while pos < len(pattern):
        char = pattern[pos]
        if char == "\\":
            if pos + 1 >= len(pattern):
                raise ValueError(f"Trailing backslash in pattern: {pattern}")
            escaped = pattern[pos + 1]
            pos += 2
            if escaped not in syntax.escaped_ops:
                if syntax.emacs_escapes and escaped in _EMACS_ESCAPES:
                    out.append(_EMACS_ESCAPES[escaped])
                elif escaped.isalnum():
                    out.append("\\" + escaped)
                else:
                    out.append(re.escape(escaped))
                expect_atom = False
                continue
            op = escaped
        elif char == "[":
            text, pos = _translate_bracket(pattern, pos)
            out.append(text)
            expect_atom = False
            continue
        elif char in syntax.plain_ops:
            op = char
            pos += 1
        else:
            out.append(re.escape(char))
            pos += 1
            expect_atom = False
            continue

        if op in "*+?{" and expect_atom:
            out.append(re.escape(op))
            expect_atom = False
        elif op == "(":
            out.append("(")
            expect_atom = True
        elif op == "|":
            out.append("|")
            expect_atom = True
        elif op == "^":
            if syntax.context_anchors and not expect_atom:
                out.append(r"\^")
                expect_atom = False
            else:
                out.append("^")
        elif op == "$":
            at_end = pos == len(pattern) or pattern.startswith(("\\)", "\\|"), pos)
            out.append("$" if at_end or not syntax.context_anchors else r"\$")
            expect_atom = False
        else:
            out.append(op)
            expect_atom = False
    return "".join(out)


class RegexMatcher(Matcher):
    """Matches entries whose whole path matches a regular expression."""

    def __init__(self, regex_type: RegexType, pattern: str, ignore_case: bool) -> None:
        flags = re.IGNORECASE if ignore_case else 0
        try:
            self.regex = re.compile(translate_pattern(pattern, regex_type), flags)
        except re.error as err:
            raise ValueError(f"Invalid regular expression {pattern!r}: {err}") from err

    def matches(self, entry: DirEntry, matcher_io: MatcherIO) -> bool:
        return self.regex.fullmatch(entry.path) is not None