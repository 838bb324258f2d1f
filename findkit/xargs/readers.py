"""Splitting the input of xargs into arguments."""

from __future__ import annotations

import re
from collections.abc import Iterator
from typing import BinaryIO

from findkit.xargs.limiters import Argument, ArgumentKind

_WHITESPACE_READ_SIZE = 4096
_BYTE_READ_SIZE = 8192
_WHITESPACE = frozenset(b" \t\n\x0c\r")
_QUOTES = frozenset(b"\"'")
_BACKSLASH = ord("\\")


class UnterminatedQuoteError(ValueError):
    """Raised when the input ends inside a quoted argument."""

    def __init__(self, quote: int) -> None:
        super().__init__(f"Unterminated quote: {quote}")
        self.quote = quote


def _read(stream: BinaryIO, size: int) -> bytes:
    while True:
        try:
            return stream.read(size)
        except InterruptedError:
            continue


def _decode(raw: bytes | bytearray) -> str:
    return bytes(raw).decode("utf-8", errors="replace")


class WhitespaceDelimitedArgumentReader:
    """Yields arguments separated by whitespace, honouring quotes and backslashes.

    An argument ended by a newline is hard-terminated; one ended by any other
    whitespace, or by the end of the input, is soft-terminated.
    """

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream
        self._arguments = self._generate()

    def __iter__(self) -> WhitespaceDelimitedArgumentReader:
        return self

    def __next__(self) -> Argument:
        return next(self._arguments)

    def _generate(self) -> Iterator[Argument]:
        buffer = b""
        pos = 0
        while True:
            result = bytearray()
            escape: int | None = None
            while True:
                if pos == len(buffer):
                    buffer = _read(self._stream, _WHITESPACE_READ_SIZE)
                    pos = 0
                    if not buffer:
                        if escape in _QUOTES:
                            raise UnterminatedQuoteError(escape)
                        if result:
                            yield Argument(_decode(result), ArgumentKind.SOFT_TERMINATED)
                        return
                char = buffer[pos]
                pos += 1
                if escape in _QUOTES:
                    if char == escape:
                        escape = None
                    else:
                        result.append(char)
                elif escape == _BACKSLASH:
                    result.append(char)
                    escape = None
                elif char in _QUOTES or char == _BACKSLASH:
                    escape = char
                elif char in _WHITESPACE:
                    if result:
                        kind = (
                            ArgumentKind.HARD_TERMINATED
                            if char == ord("\n")
                            else ArgumentKind.SOFT_TERMINATED
                        )
                        yield Argument(_decode(result), kind)
                        break
                else:
                    result.append(char)


class ByteDelimitedArgumentReader:
    """Yields arguments separated by one delimiter byte; empty ones are skipped."""

    def __init__(self, stream: BinaryIO, delimiter: int) -> None:
        self._stream = stream
        self.delimiter = delimiter
        self._arguments = self._generate()

    def __iter__(self) -> ByteDelimitedArgumentReader:
        return self

    def __next__(self) -> Argument:
        return next(self._arguments)

    def _generate(self) -> Iterator[Argument]:
        pending = bytearray()
        while True:
            index = pending.find(self.delimiter)
            if index >= 0:
                piece = pending[:index]
                del pending[: index + 1]
                if piece:
                    yield Argument(_decode(piece), ArgumentKind.HARD_TERMINATED)
                continue
            chunk = _read(self._stream, _BYTE_READ_SIZE)
            if not chunk:
                if pending:
                    yield Argument(_decode(pending), ArgumentKind.HARD_TERMINATED)
                return
            pending += chunk


_SPECIAL_ESCAPES = {
    "a": 0x07,
    "b": 0x08,
    "f": 0x0C,
    "n": 0x0A,
    "r": 0x0D,
    "t": 0x09,
    "v": 0x0B,
    "0": 0x00,
    "\\": 0x5C,
}

_DIGITS = {16: re.compile(r"\+?[0-9a-fA-F]+"), 8: re.compile(r"\+?[0-7]+")}


def _parse_byte(digits: str, base: int) -> int:
    if not digits or digits == "+":
        raise ValueError("cannot parse integer from empty string")
    if not _DIGITS[base].fullmatch(digits):
        raise ValueError("invalid digit found in string")
    value = int(digits.lstrip("+"), base)
    if value > 0xFF:
        raise ValueError("number too large to fit in target type")
    return value


def parse_delimiter(text: str) -> int:
    """Return the byte a ``-d`` delimiter names: a character or an escape."""
    if text.startswith("\\x"):
        try:
            return _parse_byte(text[2:], 16)
        except ValueError as err:
            raise ValueError(f"Invalid hex sequence: {err}") from None
    if text.startswith("\\0"):
        try:
            return _parse_byte(text[2:], 8)
        except ValueError as err:
            raise ValueError(f"Invalid octal sequence: {err}") from None
    if text.startswith("\\"):
        try:
            return _SPECIAL_ESCAPES[text[1:]]
        except KeyError:
            raise ValueError(f"Invalid escape sequence: {text}") from None
    raw = text.encode("utf-8", errors="surrogateescape")
    if len(raw) != 1:
        raise ValueError("Delimiter must be one byte")
    return raw[0]