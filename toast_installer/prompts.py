"""
Interactive Prompts
-------------------

Confirmation, port and free-text input for the installer. All reads go through
``Console.input`` so an input stream can be injected; an exhausted stream
raises EOFError rather than spinning on empty answers.
"""

import re
import sys
from typing import Optional, TextIO

from rich.console import Console

from toast_installer import ui
from toast_installer.state import ValidationError, validate_port

YES_PATTERN = re.compile(r"^y", re.IGNORECASE)
NO_PATTERN = re.compile(r"^n", re.IGNORECASE)


class Prompter:
    """Reads operator input with the installer's validation rules."""

    def __init__(
        self, console: Optional[Console] = None, stream: Optional[TextIO] = None
    ) -> None:
        self.console = console or ui.console
        self.stream = stream

    def _read(self, prompt: str) -> str:
        line = self.console.input(prompt, stream=self.stream)
        if self.stream is not None and line == "":
            raise EOFError("Input stream closed")
        return line.strip()

    def _question(self, text: str, hint: str = "") -> str:
        suffix = f" [dim]{hint}[/dim]" if hint else ""
        return f"[prompt]?[/prompt] {text}{suffix}: "

    def confirm(self, question: str) -> bool:
        """Ask a yes/no question until the answer starts with y or n."""
        while True:
            answer = self._read(self._question(question, "(y/n)"))
            if YES_PATTERN.match(answer):
                return True
            if NO_PATTERN.match(answer):
                return False
            ui.print_warning("Please answer 'y' or 'n'.")

    def read_port(
        self,
        question: str,
        default: Optional[int] = None,
        minimum: int = 1024,
        maximum: int = 65535,
    ) -> int:
        """
        Read a TCP port in [minimum, maximum].

        Empty input selects ``default`` when one is given; anything that is
        not an in-range integer is rejected and the question asked again.
        """
        hint = f"({minimum}-{maximum}"
        hint += f", default: {default})" if default is not None else ")"
        while True:
            answer = self._read(self._question(question, hint))
            if not answer and default is not None:
                return default
            try:
                return validate_port(int(answer), minimum, maximum)
            except (ValueError, ValidationError):
                ui.print_warning(
                    f"Invalid port. Enter a number between {minimum} and {maximum}."
                )

    def read_positive_int(self, question: str, default: int) -> int:
        while True:
            answer = self._read(self._question(question, f"(default: {default})"))
            if not answer:
                return default
            if answer.isdecimal() and int(answer) > 0:
                return int(answer)
            ui.print_warning("Please enter a whole number greater than zero.")

    def read_text(self, question: str) -> str:
        return self._read(self._question(question))

    def read_until_eof(self) -> str:
        """Capture everything pasted on standard input until Ctrl+D."""
        source = self.stream if self.stream is not None else sys.stdin
        return source.read()

    def pause(self, message: str = "Press Enter to return to the main menu") -> None:
        try:
            self._read(f"[dim]{message}[/dim]")
        except EOFError:
            pass
