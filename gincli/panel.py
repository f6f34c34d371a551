"""Rich rendering of an error that ends the process."""

from typing import TYPE_CHECKING

from gincli.exceptions import GinError, exit_code_of

if TYPE_CHECKING:
    from rich.panel import Panel


def _title(error: BaseException) -> str:
    title = "Error"
    if isinstance(error, GinError) and error.command_chain:
        title += ": " + " ".join(error.command_chain)
    return title


def GinPanel(error: BaseException | str, title: str | None = None) -> "Panel":  # noqa: N802
    """Red panel reporting ``error``; the exit status goes in the bottom border.

    .. code-block:: text

        ╭─ Error ─────────────────────────────────╮
        │ No help topic for 'deploy'              │
        ╰─────────────────────────── exit status 3 ╯

    Parameters
    ----------
    error: BaseException | str
        Error to report. Plain strings are shown as-is, without an exit status.
    title: str | None
        Override the title. Defaults to ``"Error"``, followed by the command chain
        of a :class:`~gincli.GinError` when known.
    """
    from rich import box
    from rich.panel import Panel
    from rich.text import Text

    subtitle = None
    if isinstance(error, BaseException):
        subtitle = f"exit status {exit_code_of(error)}"
        if title is None:
            title = _title(error)

    return Panel(
        Text(str(error), "default"),
        title=title or "Error",
        subtitle=subtitle,
        style="red",
        box=box.ROUNDED,
        expand=True,
        title_align="left",
        subtitle_align="right",
    )
