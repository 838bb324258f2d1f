"""Building command lines from input arguments and running them."""

from __future__ import annotations

import shlex
import subprocess
import sys
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum

from findkit.xargs.limiters import (
    Argument,
    ArgumentKind,
    ExhaustedCommandSpace,
    LimiterCollection,
)

_ECHO = "echo"


class CommandResult(Enum):
    """Whether every command run so far succeeded."""

    SUCCESS = "success"
    FAILURE = "failure"

    def combine(self, other: CommandResult) -> CommandResult:
        """Return the result of running both: a failure sticks."""
        return other if self is CommandResult.SUCCESS else self


class XargsError(Exception):
    """An error that ends an xargs run."""

    exit_code = 1


class ArgumentTooLargeError(XargsError):
    """Raised when an argument cannot fit into any command line."""

    def __init__(self) -> None:
        super().__init__("Argument too large")


class CommandExecutionError(XargsError):
    """Raised when a command could not be run or ended abnormally."""

    def __init__(self, message: str = "Unknown error running command") -> None:
        super().__init__(message)


class UrgentlyFailedError(CommandExecutionError):
    """Raised when a command exits with status 255."""

    exit_code = 124

    def __init__(self) -> None:
        super().__init__("Command exited with code 255")


class KilledError(CommandExecutionError):
    """Raised when a command is killed by a signal."""

    exit_code = 125

    def __init__(self, signal: int) -> None:
        super().__init__(f"Command was killed with signal {signal}")
        self.signal = signal


class CannotRunError(CommandExecutionError):
    """Raised when a command exists but cannot be started."""

    exit_code = 126

    def __init__(self, error: OSError) -> None:
        super().__init__(f"Command could not be run: {error}")
        self.error = error


class CommandNotFoundError(CommandExecutionError):
    """Raised when the command does not exist."""

    exit_code = 127

    def __init__(self) -> None:
        super().__init__("Command not found")


@dataclass
class CommandBuilderOptions:
    """Everything shared by the commands of one run.

    ``command`` is ``None`` when arguments are to be echoed rather than run.
    ``limiters`` already account for the command's own arguments.
    """

    command: tuple[str, ...] | None
    env: dict[str, str] = field(default_factory=dict)
    limiters: LimiterCollection = field(default_factory=LimiterCollection)
    verbose: bool = False
    close_stdin: bool = False


def build_options(
    command: Sequence[str] | None,
    env: Mapping[str, str],
    limiters: LimiterCollection,
    verbose: bool = False,
    close_stdin: bool = False,
) -> CommandBuilderOptions:
    """Make the options for a run, checking that the base command fits."""
    command = tuple(command) if command else None
    limiters = limiters.copy()
    try:
        for initial in command or (_ECHO,):
            limiters.try_arg(Argument(initial, ArgumentKind.INITIAL))
    except ExhaustedCommandSpace:
        raise XargsError(
            "Base command and environment are too large to fit into one command execution"
        ) from None
    return CommandBuilderOptions(command, dict(env), limiters, verbose, close_stdin)


class CommandBuilder:
    """Collects input arguments for one command line, within the limits."""

    def __init__(self, options: CommandBuilderOptions) -> None:
        self.options = options
        self.extra_args: list[str] = []
        self.limiters = options.limiters.copy()

    def add_arg(self, arg: Argument) -> None:
        """Add ``arg`` or raise :class:`ExhaustedCommandSpace` if it does not fit."""
        accepted = self.limiters.try_arg(arg)
        self.extra_args.append(accepted.arg)

    def execute(self) -> CommandResult:
        """Run the command, or echo the arguments if there is no command."""
        command = self.options.command
        argv = [*(command or (_ECHO,)), *self.extra_args]
        if self.options.verbose:
            print(shlex.join(argv), file=sys.stderr, flush=True)

        if command is None:
            print(" ".join(self.extra_args))
            return CommandResult.SUCCESS

        sys.stdout.flush()
        try:
            completed = subprocess.run(
                argv,
                env=self.options.env,
                stdin=subprocess.DEVNULL if self.options.close_stdin else None,
                check=False,
            )
        except FileNotFoundError:
            raise CommandNotFoundError() from None
        except OSError as err:
            raise CannotRunError(err) from err

        code = completed.returncode
        if code == 0:
            return CommandResult.SUCCESS
        if code == 255:
            raise UrgentlyFailedError()
        if code > 0:
            return CommandResult.FAILURE
        raise KilledError(-code)


def process_input(
    builder_options: CommandBuilderOptions,
    args: Iterable[Argument],
    max_args: int | None = None,
    max_lines: int | None = None,
    exit_if_pass_char_limit: bool = False,
    no_run_if_empty: bool = False,
) -> CommandResult:
    """Run commands over all of ``args``, as many per command as fit."""
    builder = CommandBuilder(builder_options)
    have_pending_command = False
    result = CommandResult.SUCCESS

    for arg in args:
        try:
            builder.add_arg(arg)
        except ExhaustedCommandSpace as exhausted:
            if (
                exhausted.out_of_chars
                and exit_if_pass_char_limit
                and (max_args is not None or max_lines is not None)
            ):
                raise ArgumentTooLargeError() from None
            if have_pending_command:
                result = result.combine(builder.execute())
            builder = CommandBuilder(builder_options)
            try:
                builder.add_arg(exhausted.arg)
            except ExhaustedCommandSpace:
                raise ArgumentTooLargeError() from None
        have_pending_command = True

    if not no_run_if_empty or have_pending_command:
        result = result.combine(builder.execute())
    return result