"""Coloured status lines for the operator."""

from rich.console import Console
from rich.theme import Theme

STATUS_THEME = Theme(
    {
        "info": "blue",
        "success": "green",
        "warning": "yellow",
        "error": "red",
    }
)

PREFIX = "[Template Sync]"


class StatusReporter:
    """Prints one prefixed, coloured line per status message.

    Errors go to stderr, everything else to stdout. Markup is disabled so
    template names containing brackets are printed verbatim.
    """

    def __init__(self, console: Console | None = None, error_console: Console | None = None):
        self._console = console or Console(theme=STATUS_THEME, highlight=False)
        self._error_console = error_console or Console(
            theme=STATUS_THEME, stderr=True, highlight=False
        )

    def info(self, message: str) -> None:
        self._emit(self._console, message, "info")

    def success(self, message: str) -> None:
        self._emit(self._console, message, "success")

    def warning(self, message: str) -> None:
        self._emit(self._console, message, "warning")

    def error(self, message: str) -> None:
        self._emit(self._error_console, message, "error")

    @staticmethod
    def _emit(console: Console, message: str, style: str) -> None:
        console.print(
            f"{PREFIX} {message}", style=style, markup=False, highlight=False, soft_wrap=True
        )
