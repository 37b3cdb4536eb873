"""User-interaction seam for blocking confirmations and failure alerts."""

import logging
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class Prompter(Protocol):
    """Protocol for asking the user and telling them about failures."""

    def confirm(self, message: str) -> bool:
        """Ask a yes/no question. Returns True on an affirmative answer."""
        ...

    def alert(self, message: str) -> None:
        """Show a blocking failure message."""
        ...


class ConsolePrompter:
    """Terminal prompter for the CLI."""

    def confirm(self, message: str) -> bool:
        answer = input(f"{message}\n[y/N] ")
        return answer.strip().lower() in ("y", "yes")

    def alert(self, message: str) -> None:
        print(f"❌ {message}")


class StaticPrompter:
    """Answers every confirmation the same way and records alerts.

    Used where the confirmation was already given up front (API query
    flag, ``--yes`` on the CLI) and by tests.
    """

    def __init__(self, answer: bool = True):
        self.answer = answer
        self.questions: list[str] = []
        self.alerts: list[str] = []

    def confirm(self, message: str) -> bool:
        self.questions.append(message)
        return self.answer

    def alert(self, message: str) -> None:
        logger.error(message)
        self.alerts.append(message)
