"""Limits on the size of one command line built from input arguments."""

from __future__ import annotations

import copy
import os
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum

# POSIX asks that this much room be left for the child's own environment.
_ARG_HEADROOM = 2048
# The longest command line CreateProcess accepts.
_WINDOWS_MAX_CMDLINE = 32767


class ArgumentKind(Enum):
    """Where an argument came from and what ended it."""

    INITIAL = "initial"
    HARD_TERMINATED = "hard"
    SOFT_TERMINATED = "soft"


@dataclass(frozen=True)
class Argument:
    """One argument of a command line."""

    arg: str
    kind: ArgumentKind


class ExhaustedCommandSpace(Exception):
    """Raised when an argument does not fit into the current command line."""

    def __init__(self, arg: Argument, out_of_chars: bool) -> None:
        super().__init__(f"no room for argument {arg.arg!r}")
        self.arg = arg
        self.out_of_chars = out_of_chars


class CommandSizeLimiter(ABC):
    """One constraint on the size of a command line.

    A limiter must pass the argument on to the remaining limiters with
    :func:`try_next` *before* it updates its own state, so that its count only
    changes once every other limiter has accepted the argument.
    """

    @abstractmethod
    def try_arg(self, arg: Argument, rest: Sequence[CommandSizeLimiter]) -> Argument:
        """Accept ``arg`` or raise :class:`ExhaustedCommandSpace`."""


def try_next(arg: Argument, rest: Sequence[CommandSizeLimiter]) -> Argument:
    """Offer ``arg`` to the first limiter of ``rest``, which passes it on."""
    if not rest:
        return arg
    return rest[0].try_arg(arg, rest[1:])


def count_chars_for_exec(value: str | bytes) -> int:
    """Return the room ``value`` takes on a command line, terminator included."""
    if os.name == "nt":
        text = value if isinstance(value, str) else os.fsdecode(value)
        return len(text.encode("utf-16-le", errors="surrogatepass")) // 2 + 1
    raw = value if isinstance(value, bytes) else os.fsencode(value)
    return len(raw) + 1


def system_max_chars(env: Mapping[str, str]) -> int:
    """Return how many characters of arguments the system allows with ``env``."""
    if os.name == "nt" or not hasattr(os, "sysconf"):
        return _WINDOWS_MAX_CMDLINE
    arg_max = os.sysconf("SC_ARG_MAX")
    env_size = sum(
        count_chars_for_exec(name) + count_chars_for_exec(value)
        for name, value in env.items()
    )
    return arg_max - _ARG_HEADROOM - env_size


@dataclass
class MaxCharsLimiter(CommandSizeLimiter):
    """Limits the total number of characters on the command line."""

    max_chars: int
    current_size: int = 0

    def try_arg(self, arg: Argument, rest: Sequence[CommandSizeLimiter]) -> Argument:
        chars = count_chars_for_exec(arg.arg)
        if self.current_size + chars > self.max_chars:
            raise ExhaustedCommandSpace(arg, out_of_chars=True)
        arg = try_next(arg, rest)
        self.current_size += chars
        return arg


@dataclass
class MaxArgsLimiter(CommandSizeLimiter):
    """Limits the number of input arguments; initial ones are not counted."""

    max_args: int
    current_args: int = 0

    def try_arg(self, arg: Argument, rest: Sequence[CommandSizeLimiter]) -> Argument:
        if self.current_args >= self.max_args:
            raise ExhaustedCommandSpace(arg, out_of_chars=False)
        arg = try_next(arg, rest)
        if arg.kind is not ArgumentKind.INITIAL:
            self.current_args += 1
        return arg


@dataclass
class MaxLinesLimiter(CommandSizeLimiter):
    """Limits the number of input lines.

    A line here ends at every hard termination, so with a custom delimiter
    each delimited argument counts as a line.
    """

    max_lines: int
    current_line: int = 1

    def try_arg(self, arg: Argument, rest: Sequence[CommandSizeLimiter]) -> Argument:
        if self.current_line > self.max_lines:
            raise ExhaustedCommandSpace(arg, out_of_chars=False)
        arg = try_next(arg, rest)
        if arg.kind is ArgumentKind.HARD_TERMINATED:
            self.current_line += 1
        return arg


class LimiterCollection:
    """An ordered chain of limiters that every argument must pass."""

    def __init__(self, limiters: Sequence[CommandSizeLimiter] = ()) -> None:
        self.limiters: list[CommandSizeLimiter] = list(limiters)

    def add(self, limiter: CommandSizeLimiter) -> None:
        self.limiters.append(limiter)

    def try_arg(self, arg: Argument) -> Argument:
        """Pass ``arg`` through every limiter or raise :class:`ExhaustedCommandSpace`."""
        return try_next(arg, self.limiters)

    def copy(self) -> LimiterCollection:
        """Return a collection whose limiters count independently of these."""
        return LimiterCollection([copy.copy(limiter) for limiter in self.limiters])