import pytest

from gincli import App, Args, BoolFlag, Command, Context, DispatchConfig, IntFlag, StringFlag


def test_args():
    args = Args(("a", "b", "c"))
    assert args.first() == "a"
    assert args.get(1) == "b"
    assert args.get(5) == ""
    assert args.get(5, "default") == "default"
    assert args.tail() == ("b", "c")
    assert isinstance(args.tail(), Args)
    assert args.present()


def test_args_empty():
    args = Args()
    assert args.first() == ""
    assert args.tail() == ()
    assert not args.present()


@pytest.fixture
def captured():
    return {}


@pytest.fixture
def nested_app(console, captured):
    def serve(ctx):
        captured["ctx"] = ctx
        captured["port"] = ctx.get("port")
        captured["p"] = ctx.get("p")
        captured["host"] = ctx.get("host")
        captured["global_port"] = ctx.global_get("port")
        captured["global_host"] = ctx.global_get("host", "unset")
        captured["is_set_port"] = ctx.is_set("port")
        captured["is_set_debug"] = ctx.is_set("debug")
        captured["source_port"] = ctx.source("port")
        captured["source_host"] = ctx.source("host")
        captured["flag_names"] = ctx.flag_names()
        captured["num_flags"] = ctx.num_flags()
        captured["args"] = ctx.args
        captured["narg"] = ctx.narg()

    return App(
        "prog",
        flags=[IntFlag(names="port,p", value=3000), BoolFlag(names="debug")],
        commands=[Command("serve", flags=[StringFlag(names="host")], action=serve)],
        metadata={"key": "value"},
        console=console,
        error_console=console,
    )


def test_context_lookup_walks_to_parent(nested_app, config, captured):
    nested_app.run(["prog", "--port", "9", "serve", "--host", "h", "x"], config=config)

    assert captured["port"] == 9
    assert captured["p"] == 9
    assert captured["host"] == "h"
    assert captured["global_port"] == 9
    assert captured["global_host"] == "unset"
    assert captured["is_set_port"] is True
    assert captured["is_set_debug"] is False
    assert captured["source_port"] == "cli"
    assert captured["source_host"] == "cli"
    assert captured["flag_names"] == ["host"]
    assert captured["num_flags"] == 1
    assert captured["args"] == ("x",)
    assert captured["narg"] == 1


def test_context_structure(nested_app, config, captured):
    nested_app.run(["prog", "serve"], config=config)

    ctx = captured["ctx"]
    assert isinstance(ctx, Context)
    assert ctx.command.name == "serve"
    assert ctx.app is nested_app
    assert ctx.root is ctx.parent
    assert ctx.root.parent is None
    assert list(ctx.lineage()) == [ctx, ctx.parent]
    assert ctx.metadata == {"key": "value"}
    assert ctx.config is config
    assert ctx.raw_args == ("prog", "serve")


def test_context_env_source(nested_app, captured):
    nested_app.flags[0] = IntFlag(names="port,p", value=3000, env_var="GIN_PORT")
    nested_app.run(["prog", "serve"], config=DispatchConfig(environ={"GIN_PORT": "9000"}))

    assert captured["port"] == 9000
    assert captured["source_port"] == "env"
    assert captured["is_set_port"] is True


def test_context_default_config(app):
    result = app.new_flag_set().parse([], environ={})
    ctx = Context(app, result)
    assert ctx.config == DispatchConfig()
    assert ctx.raw_args == ()
    assert ctx.get("nope", "default") == "default"
    assert ctx.global_get("nope", "default") == "default"


def test_context_inherits_shell_complete(app):
    result = app.new_flag_set().parse([], environ={})
    parent = Context(app, result, shell_complete=True)
    child = Context(app, result, parent)
    assert child.shell_complete
