import pytest

from gincli import Action, ActionKind, App, Command, ExitError, InvalidActionType, action
from gincli.action import as_action


def test_as_action_none():
    assert as_action(None) is None


def test_as_action_plain_callable():
    def foo(ctx):
        pass

    resolved = as_action(foo)
    assert isinstance(resolved, Action)
    assert resolved.kind is ActionKind.ERROR_FUNC
    assert resolved.func is foo


def test_as_action_passthrough():
    existing = Action(lambda ctx: None)
    assert as_action(existing) is existing


def test_action_decorator():
    @action
    def foo(ctx):
        return ExitError("foo")

    assert isinstance(foo, Action)
    assert foo.kind is ActionKind.ACTION_FUNC
    error = foo(None)
    assert isinstance(error, ExitError)


def test_action_decorator_invalid():
    with pytest.raises(InvalidActionType):

        @action
        def foo():
            pass


def test_action_returns_none_on_success():
    assert Action(lambda ctx: 5)(None) is None


@pytest.mark.parametrize("obj", [42, "foo", int, lambda: None, lambda a, b: None])
def test_invalid_action_rejected_at_registration_app(obj):
    with pytest.raises(InvalidActionType) as e:
        App("prog", action=obj)
    assert e.value.obj is obj


def test_invalid_action_rejected_at_registration_command():
    with pytest.raises(InvalidActionType):
        Command("foo", action=lambda: None)


def test_legacy_action_deprecated():
    def legacy(ctx) -> None:
        return ExitError("ignored")  # pyright: ignore[reportReturnType]

    with pytest.warns(DeprecationWarning):
        resolved = as_action(legacy)

    assert resolved is not None
    assert resolved.kind is ActionKind.LEGACY
    assert resolved(None) is None


def test_legacy_action_runs(app, config, calls):
    def legacy(ctx) -> None:
        calls.append("legacy")

    with pytest.warns(DeprecationWarning):
        app.action = legacy

    app.run(["prog"], config=config)
    assert calls == ["legacy"]


def test_returned_error_is_raised(console, config):
    app = App(
        "prog",
        action=lambda ctx: ExitError("boom", 4),
        console=console,
        error_console=console,
    )
    with pytest.raises(ExitError) as e:
        app.run(["prog"], config=config)
    assert e.value.exit_code == 4
    assert str(e.value) == "boom"
