"""The xargs command line: options, input selection and exit codes."""

from __future__ import annotations

import os
import re
import sys
from collections.abc import Callable, Sequence
from contextlib import ExitStack
from dataclasses import dataclass, field
from typing import Any, BinaryIO

from findkit.xargs.command import (
    CommandResult,
    XargsError,
    build_options,
    process_input,
)
from findkit.xargs.limiters import (
    LimiterCollection,
    MaxArgsLimiter,
    MaxCharsLimiter,
    MaxLinesLimiter,
    system_max_chars,
)
from findkit.xargs.readers import (
    ByteDelimitedArgumentReader,
    WhitespaceDelimitedArgumentReader,
    parse_delimiter,
)

_VERSION = "0.1.0"
_FAILURE_EXIT_CODE = 123


@dataclass
class Options:
    """The parsed command line of xargs."""

    command: list[str] = field(default_factory=list)
    arg_file: str | None = None
    delimiter: int | None = None
    exit_if_pass_char_limit: bool = False
    max_args: int | None = None
    max_lines: int | None = None
    max_procs: str | None = None
    no_run_if_empty: bool = False
    null: bool = False
    size: int | None = None
    verbose: bool = False
    help_requested: bool = False
    version_requested: bool = False
    positions: dict[str, int] = field(default_factory=dict)

    @property
    def effective_delimiter(self) -> int | None:
        """The delimiter byte to split on; of ``-0`` and ``-d`` the later wins."""
        if self.delimiter is not None and self.null:
            if self.positions["null"] > self.positions["delimiter"]:
                return 0
            return self.delimiter
        if self.null:
            return 0
        return self.delimiter

    @property
    def prefers_max_lines(self) -> bool:
        """Whether ``-L`` was given after ``--max-args``."""
        return self.positions.get("max_lines", -1) > self.positions.get("max_args", -1)


_POSITIVE = re.compile(r"\+?[0-9]+")


def positive_int(text: str) -> int:
    """Parse a whole number greater than zero."""
    if not text or text == "+":
        raise ValueError("cannot parse integer from empty string")
    if not _POSITIVE.fullmatch(text):
        raise ValueError("invalid digit found in string")
    value = int(text.lstrip("+"))
    if value <= 0:
        raise ValueError(f"Value must be > 0, not: {value}")
    return value


@dataclass(frozen=True)
class _Spec:
    key: str
    short: str
    long: str | None
    attribute: str
    help: str
    convert: Callable[[str], Any] | None = None

    @property
    def takes_value(self) -> bool:
        return self.convert is not None

    @property
    def display(self) -> str:
        name = f"--{self.long}" if self.long else f"-{self.short}"
        if self.takes_value:
            name += f" <{self.key.replace('_', '-')}>"
        return name


_SPECS = (
    _Spec("arg_file", "a", "arg-file", "arg_file",
          "Read arguments from the given file instead of stdin", str),
    _Spec("delimiter", "d", "delimiter", "delimiter",
          "Use the given delimiter to split the input", parse_delimiter),
    _Spec("exit", "x", "exit", "exit_if_pass_char_limit",
          "Exit if the number of arguments allowed by -L or -n do not "
          "fit into the number of allowed characters"),
    _Spec("max_args", "n", "max-args", "max_args",
          "Set the max number of arguments read from stdin to be passed "
          "to each command invocation (mutually exclusive with -L)", positive_int),
    _Spec("max_lines", "L", None, "max_lines",
          "Set the max number of lines from stdin to be passed to each "
          "command invocation (mutually exclusive with -n)", positive_int),
    _Spec("max_procs", "P", "max-procs", "max_procs",
          "Run up to this many commands in parallel [NOT IMPLEMENTED]", str),
    _Spec("no_run_if_empty", "r", "no-run-if-empty", "no_run_if_empty",
          "If there are no input arguments, do not run the command at all"),
    _Spec("null", "0", "null", "null",
          "Split the input by null terminators rather than whitespace"),
    _Spec("size", "s", "size", "size",
          "Set the max number of characters to be passed to each invocation", positive_int),
    _Spec("verbose", "t", "verbose", "verbose", "Be verbose"),
    _Spec("help", "h", "help", "help_requested", "Prints help information"),
    _Spec("version", "V", "version", "version_requested", "Prints version information"),
)

_BY_SHORT = {spec.short: spec for spec in _SPECS}
_BY_LONG = {spec.long: spec for spec in _SPECS if spec.long}


def _help_text() -> str:
    lines = [
        f"xargs {_VERSION}",
        "Run commands using arguments derived from standard input",
        "",
        "USAGE:",
        "    xargs [OPTIONS] [COMMAND]...",
        "",
        "OPTIONS:",
    ]
    for spec in _SPECS:
        names = f"-{spec.short}" + (f", {spec.display}" if spec.long else "")
        if not spec.long and spec.takes_value:
            names = spec.display
        lines.append(f"    {names}")
        lines.append(f"            {spec.help}")
    lines += ["", "ARGS:", "    <COMMAND>...    The command to run"]
    return "\n".join(lines)


def _apply(options: Options, spec: _Spec, value: str | None, position: int) -> None:
    options.positions[spec.key] = position
    if spec.convert is None:
        setattr(options, spec.attribute, True)
        return
    try:
        setattr(options, spec.attribute, spec.convert(value))
    except ValueError as err:
        raise ValueError(f"Invalid value for '{spec.display}': {err}") from None


def _missing_value(spec: _Spec) -> ValueError:
    return ValueError(f"The argument '{spec.display}' requires a value but none was supplied")


def parse_args(argv: Sequence[str]) -> Options:
    """Parse the arguments after the program name; raise ``ValueError`` on misuse."""
    options = Options()
    argv = list(argv)
    position = 0
    index = 0
    while index < len(argv):
        token = argv[index]
        index += 1
        if token == "--":
            options.command = argv[index:]
            break
        if token.startswith("--"):
            name, has_value, value = token[2:].partition("=")
            spec = _BY_LONG.get(name)
            if spec is None:
                raise ValueError(f"Found argument '{token}' which wasn't expected")
            if spec.takes_value and not has_value:
                if index >= len(argv):
                    raise _missing_value(spec)
                value = argv[index]
                index += 1
            elif not spec.takes_value and has_value:
                raise ValueError(f"The argument '{spec.display}' takes no value")
            _apply(options, spec, value if spec.takes_value else None, position)
            position += 1
        elif token.startswith("-") and len(token) > 1:
            for offset, letter in enumerate(token[1:], start=1):
                spec = _BY_SHORT.get(letter)
                if spec is None:
                    raise ValueError(f"Found argument '-{letter}' which wasn't expected")
                if not spec.takes_value:
                    _apply(options, spec, None, position)
                    position += 1
                    continue
                value = token[offset + 1:]
                if value.startswith("="):
                    value = value[1:]
                if not value:
                    if index >= len(argv):
                        raise _missing_value(spec)
                    value = argv[index]
                    index += 1
                _apply(options, spec, value, position)
                position += 1
                break
        else:
            options.command = argv[index - 1:]
            break
    return options


def _build_limiters(options: Options, env: dict[str, str]) -> LimiterCollection:
    limiters = LimiterCollection()
    if options.max_args is not None and options.max_lines is not None:
        print(
            "WARNING: Both --max-args and -L were given; last option will be used",
            file=sys.stderr,
        )
        if options.prefers_max_lines:
            limiters.add(MaxLinesLimiter(options.max_lines))
        else:
            limiters.add(MaxArgsLimiter(options.max_args))
    elif options.max_args is not None:
        limiters.add(MaxArgsLimiter(options.max_args))
    elif options.max_lines is not None:
        limiters.add(MaxLinesLimiter(options.max_lines))
    if options.size is not None:
        limiters.add(MaxCharsLimiter(options.size))
    limiters.add(MaxCharsLimiter(system_max_chars(env)))
    return limiters


def _run(options: Options) -> CommandResult:
    env = dict(os.environ)
    builder_options = build_options(
        options.command,
        env,
        _build_limiters(options, env),
        options.verbose,
        options.arg_file is None,
    )
    with ExitStack() as stack:
        stream: BinaryIO
        if options.arg_file is not None:
            try:
                stream = stack.enter_context(open(options.arg_file, "rb"))
            except OSError as err:
                raise XargsError(f"Failed to open {options.arg_file}: {err}") from err
        else:
            stream = getattr(sys.stdin, "buffer", sys.stdin)
        delimiter = options.effective_delimiter
        if delimiter is not None:
            reader = ByteDelimitedArgumentReader(stream, delimiter)
        else:
            reader = WhitespaceDelimitedArgumentReader(stream)
        return process_input(
            builder_options,
            reader,
            options.max_args,
            options.max_lines,
            options.exit_if_pass_char_limit,
            options.no_run_if_empty,
        )


def xargs_main(argv: Sequence[str]) -> int:
    """Run xargs with the arguments after the program name; return the exit code."""
    try:
        options = parse_args(argv)
    except ValueError as err:
        print(f"error: {err}", file=sys.stderr)
        return 1
    if options.help_requested:
        print(_help_text())
        return 0
    if options.version_requested:
        print(f"xargs {_VERSION}")
        return 0

    try:
        result = _run(options)
    except XargsError as err:
        print(f"Error: {err}", file=sys.stderr)
        return err.exit_code
    except (OSError, ValueError) as err:
        print(f"Error: {err}", file=sys.stderr)
        return 1
    return 0 if result is CommandResult.SUCCESS else _FAILURE_EXIT_CODE


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point of the ``xargs`` command."""
    return xargs_main(sys.argv[1:] if argv is None else argv)


if __name__ == "__main__":
    sys.exit(main())