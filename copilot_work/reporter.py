"""Progress reporting, injected into the dispatcher instead of printing globally."""

from abc import ABC, abstractmethod
from datetime import datetime

from rich.console import Console
from rich.markup import escape


class ProgressReporter(ABC):
    @abstractmethod
    def progress(self, message: str) -> None: ...

    @abstractmethod
    def warning(self, message: str) -> None: ...


class RichReporter(ProgressReporter):
    """Timestamped progress lines on stderr, so stdout carries only results."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console(stderr=True, highlight=False, soft_wrap=True)

    @staticmethod
    def _timestamp() -> str:
        return datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    def progress(self, message: str) -> None:
        self._console.print(f"[green]\\[{self._timestamp()}] {escape(message)}[/green]")

    def warning(self, message: str) -> None:
        self._console.print(f"[yellow]\\[{self._timestamp()}] Warning: {escape(message)}[/yellow]")


class NullReporter(ProgressReporter):
    def progress(self, message: str) -> None:
        pass

    def warning(self, message: str) -> None:
        pass
