from attrs import frozen


@frozen(kw_only=True)
class Token:
    """Tracks how a user supplied a value to the application."""

    keyword: str | None = None
    """The flag spelling (``--port``) or environment variable name (``GIN_PORT``)."""

    value: str = ""
    """Raw, unconverted string value. Empty for boolean flags given without ``=``."""

    source: str = ""
    """Where the value came from: ``"cli"`` or ``"env"``."""
