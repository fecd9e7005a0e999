"""Command template with a substitution marker."""

from typing import Iterable

from rich.text import Text

from parasect.constants import DEFAULT_SUBSTITUTION_STRING
from parasect.exceptions import ConfigurationError


class CommandTemplate:
    """External command whose arguments contain the substitution marker.

    Every occurrence of the marker, in every argument, is replaced with the
    decimal form of the candidate index before the probe is spawned.
    """

    def __init__(self, args: Iterable[str], substitution_string: str = DEFAULT_SUBSTITUTION_STRING):
        args = list(args)

        if not substitution_string:
            raise ConfigurationError("The substitution string cannot be empty.")

        if not args:
            raise ConfigurationError("The command cannot be empty.")

        if not any(substitution_string in arg for arg in args):
            raise ConfigurationError(
                f"The given command does not contain the substitution string "
                f"{substitution_string}\nCommand: {' '.join(args)}"
            )

        self._args = tuple(args)
        self._substitution_string = substitution_string

    @property
    def args(self) -> tuple[str, ...]:
        return self._args

    @property
    def substitution_string(self) -> str:
        return self._substitution_string

    def command_for(self, index: int) -> list[str]:
        """Return the argv for the given candidate index."""
        value = str(index)
        return [arg.replace(self._substitution_string, value) for arg in self._args]

    def display(self) -> str:
        return " ".join(self._args)

    def highlighted(self) -> Text:
        """Return the command line with each marker styled for the terminal."""
        text = Text()
        for position, arg in enumerate(self._args):
            if position:
                text.append(" ")
            parts = arg.split(self._substitution_string)
            for part_index, part in enumerate(parts):
                if part_index:
                    text.append(self._substitution_string, style="bold blue")
                text.append(part)
        return text

    def __repr__(self) -> str:
        return f"CommandTemplate({list(self._args)!r}, {self._substitution_string!r})"
