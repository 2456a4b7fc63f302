"""Operator confirmation.

One decision point used for both the overwrite and the rollback question: a
title and message in, a yes/no out.
"""

import asyncio
from typing import Protocol

import click


class ConfirmationPrompt(Protocol):
    async def ask(self, title: str, message: str) -> bool: ...


class ClickPrompt:
    """Asks on the terminal. Runs click.confirm off the event loop."""

    def __init__(self, default: bool = False) -> None:
        self.default = default

    def _confirm(self, title: str, message: str) -> bool:
        click.secho(title, bold=True)
        return click.confirm(message, default=self.default)

    async def ask(self, title: str, message: str) -> bool:
        return await asyncio.to_thread(self._confirm, title, message)


class StaticPrompt:
    """Answers every question the same way (--yes, non-interactive runs)."""

    def __init__(self, answer: bool) -> None:
        self.answer = answer

    async def ask(self, title: str, message: str) -> bool:
        return self.answer
