from collections.abc import Iterator
from typing import TYPE_CHECKING

from attrs import define, field

from gincli.utils import lexicographic_key

if TYPE_CHECKING:
    from gincli.command import Command

__all__ = [
    "CommandCategories",
    "CommandCategory",
]


@define
class CommandCategory:
    """A category containing commands."""

    name: str
    commands: list["Command"] = field(factory=list)

    def visible_commands(self) -> list["Command"]:
        """Commands with ``hidden=False``."""
        return [command for command in self.commands if not command.hidden]


@define
class CommandCategories:
    """Commands grouped by their declared category, for help rendering.

    Holds non-owning references; the commands belong to their :class:`~gincli.App`.
    """

    categories: list[CommandCategory] = field(factory=list)

    def add_command(self, category: str, command: "Command") -> "CommandCategories":
        """Add ``command`` to ``category``, creating the category on first occurrence."""
        for command_category in self.categories:
            if command_category.name == category:
                command_category.commands.append(command)
                return self
        self.categories.append(CommandCategory(category, [command]))
        return self

    def sort(self) -> None:
        """Order categories lexicographically (case-insensitive) by name."""
        self.categories.sort(key=lambda x: lexicographic_key(x.name))

    def visible(self) -> list[CommandCategory]:
        """Categories holding at least one visible command."""
        return [x for x in self.categories if x.visible_commands()]

    def names(self) -> list[str]:
        return [x.name for x in self.categories]

    def __iter__(self) -> Iterator[CommandCategory]:
        return iter(self.categories)

    def __len__(self) -> int:
        return len(self.categories)

    def __getitem__(self, index: int) -> CommandCategory:
        return self.categories[index]
