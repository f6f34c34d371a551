import os
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from attrs import define, field

from gincli.exceptions import FlagDefinitionError, FlagNormalizeError, FlagParseError, GinError, RequiredFlagMissing
from gincli.flag import Flag
from gincli.token import Token
from gincli.utils import to_tuple_converter

__all__ = [
    "FlagSet",
    "ParseResult",
    "check_required",
    "normalize",
]

END_OF_OPTIONS_DELIMITER = "--"


@define
class ParseResult:
    """Outcome of parsing one argument sequence against one :class:`FlagSet`."""

    flag_set: "FlagSet"

    values: dict[str, Any] = field(factory=dict)
    """Canonical flag name to value; every declared flag has an entry (its default if unset)."""

    tokens: dict[str, list[Token]] = field(factory=dict)
    """Canonical flag name to the tokens that supplied it. Only explicitly supplied flags appear."""

    args: tuple[str, ...] = field(default=(), converter=to_tuple_converter)
    """Positional arguments remaining after flag parsing."""

    error: GinError | None = None
    """Parse failure, if any. Returned rather than raised so the caller picks the handling."""

    def lookup(self, name: str) -> Flag | None:
        return self.flag_set.lookup(name)

    def is_set(self, name: str) -> bool:
        flag = self.lookup(name)
        return flag is not None and flag.name in self.tokens

    def get(self, name: str, default: Any = None) -> Any:
        flag = self.lookup(name)
        if flag is None:
            return default
        return self.values[flag.name]

    def source(self, name: str) -> str | None:
        flag = self.lookup(name)
        if flag is None:
            return None
        try:
            return self.tokens[flag.name][-1].source
        except (KeyError, IndexError):
            return "default"


@define
class FlagSet:
    """A group of :class:`Flag` specifications that an argument sequence is parsed against."""

    name: str

    # This can ONLY ever be a Tuple[Flag, ...] due to converter.
    flags: Iterable[Flag] = field(default=(), converter=to_tuple_converter)

    short_option_handling: bool = field(default=False, kw_only=True)
    """Allow ``-abc`` as shorthand for ``-a -b -c`` when all three are boolean flags."""

    _index: dict[str, Flag] = field(init=False, factory=dict)

    def __attrs_post_init__(self):
        for flag in self.flags:
            for name in flag.names:
                if name in self._index:
                    raise FlagDefinitionError(f"{self.name} flag redefined: {name}")
                self._index[name] = flag

    def lookup(self, name: str) -> Flag | None:
        """Find a flag by any of its names. Leading hyphens are ignored."""
        return self._index.get(name.lstrip("-"))

    def __contains__(self, name: str) -> bool:
        return self.lookup(name) is not None

    def parse(
        self,
        arguments: Sequence[str],
        *,
        interspersed: bool = False,
        skip_flag_parsing: bool = False,
        environ: Mapping[str, str] | None = None,
        shell_complete: bool = False,
    ) -> ParseResult:
        """Parse ``arguments`` (program name excluded).

        Parameters
        ----------
        arguments: Sequence[str]
            Tokens to parse.
        interspersed: bool
            If :obj:`False`, parsing stops at the first positional argument and
            everything from there on is positional.
            If :obj:`True`, flags may appear after positional arguments.
        skip_flag_parsing: bool
            Treat every token as positional.
        environ: Mapping[str, str] | None
            Environment consulted for :attr:`Flag.env_var` fallback.
            Defaults to :obj:`os.environ`.
        shell_complete: bool
            Shell-completion mode; parse errors are discarded.

        Returns
        -------
        ParseResult
        """
        result = ParseResult(self, values={flag.name: flag.default for flag in self.flags})
        arguments = list(arguments)
        args: list[str] = []

        if skip_flag_parsing:
            args.extend(arguments)
            arguments = []

        i = 0
        try:
            while i < len(arguments):
                token = arguments[i]
                i += 1
                if token == END_OF_OPTIONS_DELIMITER:
                    args.extend(arguments[i:])
                    break
                if len(token) < 2 or not token.startswith("-"):
                    if interspersed:
                        args.append(token)
                        continue
                    args.extend(arguments[i - 1 :])
                    break
                i = self._parse_flag_token(result, token, arguments, i)
        except FlagParseError as e:
            result.error = e
            args.extend(arguments[i:])

        result.args = tuple(args)

        env_error = self._apply_environment(result, os.environ if environ is None else environ)
        if result.error is None:
            result.error = env_error

        if shell_complete:
            result.error = None

        return result

    def _parse_flag_token(self, result: ParseResult, token: str, arguments: list[str], i: int) -> int:
        """Consume a single flag reference; returns the index of the next unconsumed token."""
        num_minuses = 2 if token.startswith("--") else 1
        body = token[num_minuses:]
        if not body or body[0] in "-=":
            raise FlagParseError(token=token, reason="bad flag syntax")

        name, sep, value = body.partition("=")
        has_value = bool(sep)
        keyword = token[: num_minuses + len(name)]
        flag = self._index.get(name)

        if flag is None:
            cluster = self._split_short_options(body) if num_minuses == 1 and not has_value else None
            if cluster is None:
                raise FlagParseError(token=token)
            for short_flag, short_name in cluster:
                self._record(result, short_flag, Token(keyword=f"-{short_name}", value="", source="cli"), "true")
            return i

        if flag.takes_value and not has_value:
            if i >= len(arguments):
                raise FlagParseError(token=token, reason="flag needs an argument")
            value = arguments[i]
            i += 1

        raw = value if (has_value or flag.takes_value) else "true"
        self._record(result, flag, Token(keyword=keyword, value=value, source="cli"), raw)
        return i

    def _record(self, result: ParseResult, flag: Flag, token: Token, raw: str) -> None:
        tokens = result.tokens.setdefault(flag.name, [])
        try:
            result.values[flag.name] = flag.apply(result.values[flag.name], raw, first=not tokens)
        except ValueError as e:
            raise FlagParseError(
                token=token.keyword or "",
                msg=f'invalid value "{raw}" for flag {token.keyword}: {e}',
            ) from e
        tokens.append(token)

    def _split_short_options(self, body: str) -> list[tuple[Flag, str]] | None:
        """Expand ``abc`` (from ``-abc``) into individual boolean flags.

        Returns :obj:`None` if clustering is disabled or any letter is not a standalone boolean flag.
        """
        if not self.short_option_handling or len(body) < 2:
            return None
        cluster = []
        for char in body:
            flag = self._index.get(char)
            if flag is None or flag.takes_value:
                return None
            cluster.append((flag, char))
        return cluster

    def _apply_environment(self, result: ParseResult, environ: Mapping[str, str]) -> FlagParseError | None:
        error = None
        for flag in self.flags:
            if flag.name in result.tokens or not flag.env_var:
                continue
            raw = environ.get(flag.env_var, "")
            if not raw:
                # An empty variable counts as unset.
                continue
            try:
                result.values[flag.name] = flag.apply_env(raw)
            except ValueError as e:
                if error is None:
                    error = FlagParseError(
                        token=flag.env_var,
                        msg=f'could not parse "{raw}" as {flag.type_name} for flag {flag.name} '
                        f"from environment variable {flag.env_var}: {e}",
                    )
                continue
            result.tokens[flag.name] = [Token(keyword=flag.env_var, value=raw, source="env")]
        return error


def normalize(result: ParseResult) -> None:
    """Ensure each flag was referenced through at most one of its names on the command line.

    Raises
    ------
    FlagNormalizeError
    """
    for name, tokens in result.tokens.items():
        used: list[str] = []
        for token in tokens:
            if token.source != "cli" or token.keyword is None:
                continue
            spelled = token.keyword.lstrip("-")
            if spelled not in used:
                used.append(spelled)
        if len(used) > 1:
            raise FlagNormalizeError(names=tuple(used))


def check_required(flags: Iterable[Flag], result: ParseResult) -> None:
    """Raise :class:`RequiredFlagMissing` for the first required flag that was not supplied.

    A value counts as supplied if it came from the command line or from the flag's environment variable.
    """
    for flag in flags:
        if flag.required and not result.is_set(flag.name):
            raise RequiredFlagMissing(flag=flag)
