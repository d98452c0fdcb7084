"""
Terminal: interactive input and user-facing messages.

Services never call ``input()`` or ``print()`` directly. They receive a
Terminal: ``ClickTerminal`` for real sessions, ``ScriptedTerminal`` for
non-interactive runs and tests, which supply the same answers
programmatically.
"""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from collections import deque
from collections.abc import Iterable

import click

from marznodectl.core.errors import UserInputError


class Terminal(ABC):
    """Input provider plus message sink."""

    @abstractmethod
    def prompt(self, text: str, default: str | None = None) -> str:
        """Ask one line. Empty input returns ``default`` when given."""

    @abstractmethod
    def read_block(self, text: str) -> str:
        """Ask for multi-line input terminated by EOF."""

    @abstractmethod
    def echo(self, message: str = "") -> None:
        """Plain output line."""

    @abstractmethod
    def info(self, message: str) -> None: ...

    @abstractmethod
    def warn(self, message: str) -> None: ...

    @abstractmethod
    def success(self, message: str) -> None: ...

    @abstractmethod
    def error(self, message: str) -> None: ...


class ClickTerminal(Terminal):
    """Colored ``[INFO]``/``[WARN]``/``[SUCCESS]``/``[ERROR]`` output via click."""

    def prompt(self, text: str, default: str | None = None) -> str:
        value = click.prompt(
            text,
            default="" if default is None else default,
            show_default=False,
        )
        return str(value).strip()

    def read_block(self, text: str) -> str:
        self.info(text)
        return sys.stdin.read()

    def echo(self, message: str = "") -> None:
        click.echo(message)

    def info(self, message: str) -> None:
        click.echo(f"{click.style('[INFO]', fg='blue')} {message}")

    def warn(self, message: str) -> None:
        click.echo(f"{click.style('[WARN]', fg='yellow')} {message}", err=True)

    def success(self, message: str) -> None:
        click.echo(f"{click.style('[SUCCESS]', fg='green')} {message}")

    def error(self, message: str) -> None:
        click.echo(f"{click.style('[ERROR]', fg='red')} {message}", err=True)


class ScriptedTerminal(Terminal):
    """Answers prompts from a fixed list and records every message.

    Args:
        answers: Replies to ``prompt`` in order. An empty string means
            "press Enter" and yields the prompt's default.
        block: Text returned by ``read_block`` (e.g. a certificate).
    """

    def __init__(self, answers: Iterable[str] = (), block: str = ""):
        self._answers = deque(answers)
        self._block = block
        self.prompts: list[str] = []
        self.messages: list[tuple[str, str]] = []

    def prompt(self, text: str, default: str | None = None) -> str:
        self.prompts.append(text)
        if not self._answers:
            raise UserInputError(f"No scripted answer for prompt: {text!r}")
        value = self._answers.popleft().strip()
        if not value and default is not None:
            return default
        return value

    def read_block(self, text: str) -> str:
        self.prompts.append(text)
        return self._block

    def _record(self, level: str, message: str) -> None:
        self.messages.append((level, message))

    def echo(self, message: str = "") -> None:
        self._record("echo", message)

    def info(self, message: str) -> None:
        self._record("info", message)

    def warn(self, message: str) -> None:
        self._record("warn", message)

    def success(self, message: str) -> None:
        self._record("success", message)

    def error(self, message: str) -> None:
        self._record("error", message)

    def texts(self, level: str | None = None) -> list[str]:
        """Recorded messages, optionally only those of one level."""
        return [m for lvl, m in self.messages if level is None or lvl == level]
