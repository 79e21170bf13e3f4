"""Interactive input sources.

Stages never call ``input()`` directly: they receive a ``Prompter`` so tests
can replay a scripted sequence of answers.
"""

from __future__ import annotations

from typing import Protocol

from rich.prompt import Confirm, Prompt

from devbox.utils import console


class Prompter(Protocol):
    def ask(self, text: str) -> str: ...

    def confirm(self, text: str, default: bool = False) -> bool: ...


class RichPrompter:
    """Prompter backed by ``rich.prompt`` on the shared console."""

    def ask(self, text: str) -> str:
        return Prompt.ask(text, console=console, default="", show_default=False)

    def confirm(self, text: str, default: bool = False) -> bool:
        return Confirm.ask(text, console=console, default=default)
