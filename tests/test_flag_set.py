import pytest

from gincli import (
    BoolFlag,
    FlagDefinitionError,
    FlagNormalizeError,
    FlagParseError,
    FlagSet,
    IntFlag,
    RequiredFlagMissing,
    StringFlag,
    StringSliceFlag,
)
from gincli.flag_set import check_required, normalize


@pytest.fixture
def flag_set():
    return FlagSet(
        "prog",
        [
            IntFlag(names="port,p", value=3000, env_var="GIN_PORT"),
            StringFlag(names="name,n"),
            BoolFlag(names="verbose,v"),
            BoolFlag(names="x"),
        ],
    )


def test_parse_defaults(flag_set):
    result = flag_set.parse([], environ={})
    assert result.error is None
    assert result.values == {"port": 3000, "name": "", "verbose": False, "x": False}
    assert result.args == ()
    assert result.tokens == {}
    assert result.source("port") == "default"


def test_parse_values(flag_set):
    result = flag_set.parse(["--port", "8080", "--name=x", "-v", "a"], environ={})
    assert result.error is None
    assert result.get("port") == 8080
    assert result.get("p") == 8080
    assert result.get("name") == "x"
    assert result.get("verbose") is True
    assert result.args == ("a",)


def test_parse_records_tokens(flag_set):
    result = flag_set.parse(["-p", "8080"], environ={})
    (token,) = result.tokens["port"]
    assert token.keyword == "-p"
    assert token.value == "8080"
    assert token.source == "cli"
    assert result.is_set("port")
    assert result.is_set("p")
    assert not result.is_set("name")


def test_parse_bool_with_value(flag_set):
    result = flag_set.parse(["--verbose=false"], environ={})
    assert result.get("verbose") is False
    assert result.is_set("verbose")


def test_parse_stops_at_first_positional(flag_set):
    result = flag_set.parse(["a", "--port", "1"], environ={})
    assert result.error is None
    assert result.get("port") == 3000
    assert result.args == ("a", "--port", "1")


def test_parse_interspersed(flag_set):
    result = flag_set.parse(["a", "--port", "1", "b"], interspersed=True, environ={})
    assert result.error is None
    assert result.get("port") == 1
    assert result.args == ("a", "b")


def test_parse_end_of_options(flag_set):
    result = flag_set.parse(["-v", "--", "--port", "1"], environ={})
    assert result.get("verbose") is True
    assert result.get("port") == 3000
    assert result.args == ("--port", "1")


def test_parse_single_hyphen_is_positional(flag_set):
    result = flag_set.parse(["-"], environ={})
    assert result.error is None
    assert result.args == ("-",)


def test_parse_skip_flag_parsing(flag_set):
    result = flag_set.parse(["--port", "1", "--bogus"], skip_flag_parsing=True, environ={})
    assert result.error is None
    assert result.args == ("--port", "1", "--bogus")
    assert result.get("port") == 3000


def test_parse_unknown_flag(flag_set):
    result = flag_set.parse(["--nope", "a"], environ={})
    assert isinstance(result.error, FlagParseError)
    assert result.error.token == "--nope"
    assert str(result.error) == "flag provided but not defined: --nope"
    assert result.args == ("a",)


def test_parse_missing_argument(flag_set):
    result = flag_set.parse(["--port"], environ={})
    assert isinstance(result.error, FlagParseError)
    assert str(result.error) == "flag needs an argument: --port"


def test_parse_invalid_value(flag_set):
    result = flag_set.parse(["--port", "abc"], environ={})
    assert isinstance(result.error, FlagParseError)
    assert 'invalid value "abc" for flag --port' in str(result.error)


@pytest.mark.parametrize("token", ["---port", "-=1", "--=1"])
def test_parse_bad_syntax(flag_set, token):
    result = flag_set.parse([token], environ={})
    assert isinstance(result.error, FlagParseError)
    assert str(result.error) == f"bad flag syntax: {token}"


def test_parse_errors_cleared_when_completing(flag_set):
    result = flag_set.parse(["--nope"], environ={}, shell_complete=True)
    assert result.error is None


def test_short_option_clustering_enabled():
    flag_set = FlagSet("prog", [BoolFlag(names="v"), BoolFlag(names="x")], short_option_handling=True)
    result = flag_set.parse(["-vx"], environ={})
    assert result.error is None
    assert result.get("v") is True
    assert result.get("x") is True
    assert [t.keyword for t in result.tokens["v"]] == ["-v"]


def test_short_option_clustering_disabled():
    flag_set = FlagSet("prog", [BoolFlag(names="v"), BoolFlag(names="x")])
    result = flag_set.parse(["-vx"], environ={})
    assert isinstance(result.error, FlagParseError)
    assert result.error.token == "-vx"
    assert str(result.error) == "flag provided but not defined: -vx"


def test_short_option_clustering_requires_booleans():
    flag_set = FlagSet("prog", [BoolFlag(names="v"), IntFlag(names="n")], short_option_handling=True)
    result = flag_set.parse(["-vn"], environ={})
    assert isinstance(result.error, FlagParseError)


def test_env_fallback(flag_set):
    result = flag_set.parse([], environ={"GIN_PORT": "9000"})
    assert result.error is None
    assert result.get("port") == 9000
    assert result.is_set("port")
    assert result.source("port") == "env"


def test_cli_beats_env(flag_set):
    result = flag_set.parse(["--port", "8080"], environ={"GIN_PORT": "9000"})
    assert result.get("port") == 8080
    assert result.source("port") == "cli"


def test_env_invalid_value(flag_set):
    result = flag_set.parse([], environ={"GIN_PORT": "abc"})
    assert isinstance(result.error, FlagParseError)
    assert "GIN_PORT" in str(result.error)
    assert result.get("port") == 3000


@pytest.mark.parametrize("flag", [IntFlag(names="port", value=3000, env_var="ENV"), BoolFlag(names="port", env_var="ENV")])
def test_env_empty_value_is_unset(flag):
    flag_set = FlagSet("prog", [flag])
    result = flag_set.parse([], environ={"ENV": ""})
    assert result.error is None
    assert not result.is_set("port")
    assert result.get("port") == flag.default
    assert result.source("port") == "default"


def test_check_required_empty_env():
    flag_set = FlagSet("prog", [BoolFlag(names="debug", env_var="DBG", required=True)])
    with pytest.raises(RequiredFlagMissing):
        check_required(flag_set.flags, flag_set.parse([], environ={"DBG": ""}))


def test_string_slice_accumulates():
    flag_set = FlagSet("prog", [StringSliceFlag(names="excludeDir,x", value=["vendor"], env_var="EXCLUDE")])
    result = flag_set.parse(["-x", "a", "--excludeDir", "b"], environ={})
    assert result.get("excludeDir") == ("a", "b")

    result = flag_set.parse([], environ={})
    assert result.get("excludeDir") == ("vendor",)

    result = flag_set.parse([], environ={"EXCLUDE": "a, b"})
    assert result.get("excludeDir") == ("a", "b")


def test_flag_redefined():
    with pytest.raises(FlagDefinitionError):
        FlagSet("prog", [StringFlag(names="name,n"), IntFlag(names="num,n")])


def test_lookup_ignores_hyphens(flag_set):
    assert flag_set.lookup("--port") is flag_set.lookup("p")
    assert "-v" in flag_set
    assert "nope" not in flag_set


def test_normalize_two_forms(flag_set):
    result = flag_set.parse(["--port", "1", "-p", "2"], environ={})
    with pytest.raises(FlagNormalizeError) as e:
        normalize(result)
    assert str(e.value) == "Cannot use two forms of the same flag: port p"


def test_normalize_same_form_twice(flag_set):
    result = flag_set.parse(["-p", "1", "-p", "2"], environ={})
    normalize(result)
    assert result.get("port") == 2


def test_check_required():
    flag = StringFlag(names="token", env_var="TOKEN", required=True)
    flag_set = FlagSet("prog", [flag])

    with pytest.raises(RequiredFlagMissing) as e:
        check_required(flag_set.flags, flag_set.parse([], environ={}))
    assert str(e.value) == 'Required flag "--token" not set (environment variable "TOKEN").'

    check_required(flag_set.flags, flag_set.parse(["--token", "abc"], environ={}))
    check_required(flag_set.flags, flag_set.parse([], environ={"TOKEN": "abc"}))
