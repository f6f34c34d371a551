import pytest

from gincli import BoolFlag, IntFlag, StringFlag, StringSliceFlag
from gincli.flag import visible_flags


def test_flag_names_from_string():
    flag = IntFlag(names="port,p", value=3000)
    assert flag.names == ("port", "p")
    assert flag.name == "port"
    assert flag.default == 3000


def test_flag_requires_a_name():
    with pytest.raises(ValueError):
        StringFlag(names="")


def test_flag_structural_equality():
    assert BoolFlag(names="verbose,v") == BoolFlag(names=["verbose", "v"])
    assert hash(BoolFlag(names="verbose,v")) == hash(BoolFlag(names=["verbose", "v"]))
    assert BoolFlag(names="verbose") != BoolFlag(names="verbose", usage="be loud")
    assert len({BoolFlag(names="v"), BoolFlag(names="v")}) == 1


def test_flag_str():
    assert str(IntFlag(names="port,p")) == "--port, -p value"
    assert str(BoolFlag(names="v")) == "-v"


def test_flag_display_names():
    assert StringFlag(names="name,n").display_names() == ("--name", "-n")


def test_flag_is_immutable():
    flag = StringFlag(names="name")
    with pytest.raises(AttributeError):
        flag.usage = "foo"  # pyright: ignore[reportAttributeAccessIssue]


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("10", 10),
        ("-3", -3),
        ("0x10", 16),
        ("010", 10),
    ],
)
def test_int_flag_convert(raw, expected):
    assert IntFlag(names="n").convert(raw) == expected


def test_int_flag_convert_invalid():
    with pytest.raises(ValueError):
        IntFlag(names="n").convert("abc")


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("true", True),
        ("1", True),
        ("YES", True),
        ("false", False),
        ("0", False),
        ("off", False),
    ],
)
def test_bool_flag_convert(raw, expected):
    assert BoolFlag(names="b").convert(raw) is expected


def test_bool_flag_convert_invalid():
    with pytest.raises(ValueError):
        BoolFlag(names="b").convert("maybe")


def test_bool_flag_takes_no_value():
    assert BoolFlag.takes_value is False
    assert StringFlag.takes_value is True


def test_string_slice_flag_first_occurrence_replaces_default():
    flag = StringSliceFlag(names="x", value=["vendor"])
    assert flag.value == ("vendor",)

    value = flag.apply(flag.default, "a", first=True)
    assert value == ("a",)
    value = flag.apply(value, "b", first=False)
    assert value == ("a", "b")


def test_string_slice_flag_env_split():
    assert StringSliceFlag(names="x").apply_env("a, b,,c") == ("a", "b", "c")


def test_visible_flags():
    shown = StringFlag(names="shown")
    hidden = StringFlag(names="hidden", hidden=True)
    assert visible_flags([shown, hidden]) == [shown]
