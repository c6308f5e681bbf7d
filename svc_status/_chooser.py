"""Interactive selection of one value from a list of choices."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt

from svc_status._status_errors import SelectionAbortedError, SelectionFailedError


class Chooser(Protocol):
    """Ask a human to pick exactly one of *choices*.

    Implementations return a member of *choices*, raise
    :class:`SelectionAbortedError` when the user cancels and
    :class:`SelectionFailedError` for any other failure.
    """

    def select_one(self, prompt: str, help_text: str, choices: Sequence[str]) -> str: ...


class RichChooser:
    """Numbered-list chooser rendered with ``rich``.

    The user may answer with either the number shown next to a choice or the
    choice itself. An answer that names a choice wins over a number.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(stderr=True)

    def select_one(self, prompt: str, help_text: str, choices: Sequence[str]) -> str:
        if not choices:
            msg = "no choices available to select from"
            raise SelectionFailedError(msg)

        options = list(choices)
        numbers = [str(index) for index in range(1, len(options) + 1)]
        self.console.print(f"[bold]{escape(prompt)}[/bold]")
        if help_text:
            self.console.print(f"[dim]{escape(help_text)}[/dim]")
        for number, option in zip(numbers, options):
            self.console.print(f"  [cyan]{number}[/cyan]. {escape(option)}")

        try:
            answer = Prompt.ask(
                "Select",
                console=self.console,
                choices=numbers + options,
                show_choices=False,
                default=numbers[0],
            )
        except (KeyboardInterrupt, EOFError) as exc:
            msg = "selection aborted by user"
            raise SelectionAbortedError(msg) from exc
        except OSError as exc:
            msg = f"prompt failed: {exc}"
            raise SelectionFailedError(msg) from exc

        if answer in options:
            return answer
        return options[int(answer) - 1]


__all__ = ["Chooser", "RichChooser"]
