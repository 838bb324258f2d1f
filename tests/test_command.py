import os
import sys

import pytest

from findkit.xargs.command import (
    ArgumentTooLargeError,
    CannotRunError,
    CommandBuilder,
    CommandExecutionError,
    CommandNotFoundError,
    CommandResult,
    KilledError,
    UrgentlyFailedError,
    XargsError,
    build_options,
    process_input,
)
from findkit.xargs.limiters import (
    Argument,
    ArgumentKind,
    ExhaustedCommandSpace,
    LimiterCollection,
    MaxArgsLimiter,
    MaxCharsLimiter,
)


def soft(*values):
    return [Argument(value, ArgumentKind.SOFT_TERMINATED) for value in values]


def echo_options(*limiters, verbose=False):
    return build_options(None, {}, LimiterCollection(limiters), verbose, True)


def python_options(code, *limiters):
    return build_options(
        [sys.executable, "-c", code], dict(os.environ), LimiterCollection(limiters), False, True
    )


def test_combine_keeps_first_failure():
    assert CommandResult.SUCCESS.combine(CommandResult.SUCCESS) is CommandResult.SUCCESS
    assert CommandResult.SUCCESS.combine(CommandResult.FAILURE) is CommandResult.FAILURE
    assert CommandResult.FAILURE.combine(CommandResult.SUCCESS) is CommandResult.FAILURE


def test_error_messages_and_exit_codes():
    assert str(ArgumentTooLargeError()) == "Argument too large"
    assert ArgumentTooLargeError().exit_code == 1
    assert str(UrgentlyFailedError()) == "Command exited with code 255"
    assert UrgentlyFailedError().exit_code == 124
    killed = KilledError(9)
    assert str(killed) == "Command was killed with signal 9"
    assert (killed.signal, killed.exit_code) == (9, 125)
    cannot = CannotRunError(OSError("boom"))
    assert str(cannot) == "Command could not be run: boom"
    assert cannot.exit_code == 126
    assert str(CommandNotFoundError()) == "Command not found"
    assert CommandNotFoundError().exit_code == 127
    assert str(CommandExecutionError()) == "Unknown error running command"
    assert CommandExecutionError().exit_code == 1


def test_build_options_rejects_too_large_base_command():
    with pytest.raises(XargsError, match="Base command and environment are too large"):
        echo_options(MaxCharsLimiter(3))


def test_build_options_counts_initial_args_without_touching_input():
    limiter = MaxCharsLimiter(100)
    options = build_options(["ls", "-l"], {}, LimiterCollection([limiter]))
    assert options.command == ("ls", "-l")
    assert options.limiters.limiters[0].current_size == 6
    assert limiter.current_size == 0


def test_empty_command_means_echo():
    options = build_options([], {}, LimiterCollection())
    assert options.command is None


def test_builder_rejects_argument_that_does_not_fit():
    builder = CommandBuilder(echo_options(MaxCharsLimiter(9)))
    builder.add_arg(Argument("abc", ArgumentKind.SOFT_TERMINATED))
    with pytest.raises(ExhaustedCommandSpace):
        builder.add_arg(Argument("d", ArgumentKind.SOFT_TERMINATED))
    assert builder.extra_args == ["abc"]


def test_builder_echoes_arguments(capsys):
    builder = CommandBuilder(echo_options())
    builder.add_arg(Argument("a", ArgumentKind.SOFT_TERMINATED))
    builder.add_arg(Argument("b c", ArgumentKind.HARD_TERMINATED))
    assert builder.execute() is CommandResult.SUCCESS
    assert capsys.readouterr().out == "a b c\n"


def test_verbose_echo_prints_command(capsys):
    builder = CommandBuilder(echo_options(verbose=True))
    builder.add_arg(Argument("a", ArgumentKind.SOFT_TERMINATED))
    builder.execute()
    captured = capsys.readouterr()
    assert captured.err == "echo a\n"
    assert captured.out == "a\n"


def test_process_input_splits_by_max_args(capsys):
    result = process_input(echo_options(MaxArgsLimiter(2)), soft("a", "b", "c"), max_args=2)
    assert result is CommandResult.SUCCESS
    assert capsys.readouterr().out == "a b\nc\n"


def test_process_input_runs_once_without_input(capsys):
    process_input(echo_options(), [])
    assert capsys.readouterr().out == "\n"


def test_process_input_no_run_if_empty(capsys):
    process_input(echo_options(), [], no_run_if_empty=True)
    assert capsys.readouterr().out == ""


def test_process_input_argument_too_large(capsys):
    with pytest.raises(ArgumentTooLargeError):
        process_input(echo_options(MaxCharsLimiter(10)), soft("abcdefghijkl", "ab"))
    assert capsys.readouterr().out == ""


def test_char_limit_splits_without_exit_flag(capsys):
    options = echo_options(MaxArgsLimiter(2), MaxCharsLimiter(11))
    process_input(options, soft("abcd", "efgh"), max_args=2)
    assert capsys.readouterr().out == "abcd\nefgh\n"


def test_char_limit_with_exit_flag_raises(capsys):
    options = echo_options(MaxArgsLimiter(2), MaxCharsLimiter(11))
    with pytest.raises(ArgumentTooLargeError):
        process_input(options, soft("abcd", "efgh"), max_args=2, exit_if_pass_char_limit=True)
    assert capsys.readouterr().out == ""


def test_exit_flag_ignored_without_max_args_or_lines(capsys):
    options = echo_options(MaxCharsLimiter(11))
    process_input(options, soft("ab", "cd", "efg"), exit_if_pass_char_limit=True)
    assert capsys.readouterr().out == "ab cd\nefg\n"


def test_execute_runs_command_with_arguments(capfd):
    code = "import sys; print(','.join(sys.argv[1:]))"
    result = process_input(python_options(code), soft("x", "y"))
    assert result is CommandResult.SUCCESS
    assert capfd.readouterr().out.strip() == "x,y"


def test_execute_reports_failure():
    options = python_options("import sys; sys.exit(3)")
    assert process_input(options, soft("a")) is CommandResult.FAILURE


def test_failure_is_remembered_across_commands():
    code = "import sys; sys.exit(2 if sys.argv[1] == 'bad' else 0)"
    options = python_options(code, MaxArgsLimiter(1))
    assert process_input(options, soft("bad", "good"), max_args=1) is CommandResult.FAILURE


def test_execute_urgent_failure():
    options = python_options("import sys; sys.exit(255)")
    with pytest.raises(UrgentlyFailedError):
        process_input(options, soft("a"))


def test_execute_command_not_found():
    options = build_options(["this-file-does-not-exist"], dict(os.environ), LimiterCollection())
    with pytest.raises(CommandNotFoundError):
        CommandBuilder(options).execute()


def test_execute_not_executable(tmp_path):
    script = tmp_path / "not-executable"
    script.write_text("plain text\n")
    script.chmod(0o644)
    options = build_options([str(script)], dict(os.environ), LimiterCollection())
    with pytest.raises(CannotRunError) as info:
        CommandBuilder(options).execute()
    assert info.value.exit_code == 126