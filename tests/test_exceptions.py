import pytest

from gincli import (
    ExitCoder,
    ExitError,
    FlagParseError,
    GinError,
    StringFlag,
    UsageError,
    exit_code_of,
    handle_exit_coder,
)
from gincli.exceptions import RequiredFlagMissing


def test_exit_error_is_exit_coder():
    error = ExitError("boom", 3)
    assert isinstance(error, ExitCoder)
    assert isinstance(error, GinError)
    assert error.exit_code == 3
    assert str(error) == "boom"


def test_exit_error_default_code():
    assert ExitError("boom").exit_code == 1


def test_plain_error_is_not_exit_coder():
    assert not isinstance(ValueError("x"), ExitCoder)


@pytest.mark.parametrize(
    "error, expected",
    [
        (None, 0),
        (ExitError("x", 5), 5),
        (ValueError("x"), 1),
        (FlagParseError(token="--x"), 1),
        (UsageError(error=ExitError("x", 4)), 4),
    ],
)
def test_exit_code_of(error, expected):
    assert exit_code_of(error) == expected


def test_usage_error_str():
    inner = FlagParseError(token="--nope")
    error = UsageError(error=inner, is_subcommand=True)
    assert str(error) == "flag provided but not defined: --nope"
    assert error.is_subcommand


def test_gin_error_msg_override():
    assert str(FlagParseError(msg="custom", token="--x")) == "custom"
    assert str(GinError()) == ""


def test_required_flag_missing_without_env():
    error = RequiredFlagMissing(flag=StringFlag(names="n"))
    assert str(error) == 'Required flag "-n" not set.'


def test_handle_exit_coder_prints_message(console):
    with console.capture() as capture:
        handle_exit_coder(None, ExitError("bye", 2), console=console)  # pyright: ignore[reportArgumentType]
    assert capture.get() == "bye\n"


def test_handle_exit_coder_ignores_other_errors(console):
    with console.capture() as capture:
        handle_exit_coder(None, ValueError("nope"), console=console)  # pyright: ignore[reportArgumentType]
        handle_exit_coder(None, None, console=console)  # pyright: ignore[reportArgumentType]
    assert capture.get() == ""
