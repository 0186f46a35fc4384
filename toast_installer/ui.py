"""
Terminal UI and Logging
-----------------------

Nord-themed console helpers shared by every step: the pyfiglet banner, the
four operator-facing severities and the file logger that mirrors them.
"""

import logging
import os
import shutil
from pathlib import Path
from typing import List, Optional, Union

import pyfiglet
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.style import Style
from rich.text import Text
from rich.theme import Theme

from toast_installer.config import APP_NAME, APP_SUBTITLE, VERSION

LOGGER_NAME = "toast_installer"


# ----------------------------------------------------------------
# Nord-Themed Colors
# ----------------------------------------------------------------
class NordColors:
    """Nord color palette for consistent theming throughout the application."""

    SNOW_STORM_1: str = "#D8DEE9"
    SNOW_STORM_2: str = "#E5E9F0"
    FROST_1: str = "#8FBCBB"
    FROST_2: str = "#88C0D0"
    FROST_3: str = "#81A1C1"
    FROST_4: str = "#5E81AC"
    RED: str = "#BF616A"
    YELLOW: str = "#EBCB8B"
    GREEN: str = "#A3BE8C"
    PURPLE: str = "#B48EAD"

    @classmethod
    def get_frost_gradient(cls, steps: int = 4) -> List[str]:
        """Return a gradient of frost colors for banner styling."""
        frosts = [cls.FROST_1, cls.FROST_2, cls.FROST_3, cls.FROST_4]
        return frosts[:steps]


nord_theme = Theme(
    {
        "info": f"bold {NordColors.FROST_2}",
        "warning": f"bold {NordColors.YELLOW}",
        "error": f"bold {NordColors.RED}",
        "success": f"bold {NordColors.GREEN}",
        "prompt": f"bold {NordColors.PURPLE}",
        "command": f"bold {NordColors.FROST_4}",
        "path": f"italic {NordColors.FROST_1}",
    }
)

console: Console = Console(theme=nord_theme)
logger = logging.getLogger(LOGGER_NAME)


# ----------------------------------------------------------------
# Logger Setup
# ----------------------------------------------------------------
def setup_logging(log_file: Union[str, Path]) -> logging.Logger:
    """
    Configure the installer logger.

    Operator-facing lines are already printed by the print_* helpers, so the
    console handler only surfaces warnings raised outside of them. Everything
    at DEBUG and above goes to the log file.
    """
    log_file = Path(log_file)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    for h in logger.handlers[:]:
        logger.removeHandler(h)
        h.close()

    console_handler = RichHandler(console=console, rich_tracebacks=True)
    console_handler.setLevel(logging.WARNING)
    console_handler.addFilter(lambda record: not getattr(record, "printed", False))
    logger.addHandler(console_handler)

    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
    except OSError as e:
        logger.warning(f"Could not open log file {log_file}: {e}")
        return logger

    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(
            "[%(asctime)s] [%(levelname)s] %(message)s", "%Y-%m-%d %H:%M:%S"
        )
    )
    logger.addHandler(file_handler)

    try:
        os.chmod(str(log_file), 0o600)
    except OSError as e:
        logger.warning(f"Could not set permissions on log file {log_file}: {e}")

    logger.debug("Logging initialized: %s", log_file)
    return logger


# ----------------------------------------------------------------
# UI Helper Functions
# ----------------------------------------------------------------
def clear_screen() -> None:
    """Clear the terminal screen."""
    console.clear()


def create_header(title: str = APP_NAME) -> Panel:
    """
    Create the ASCII banner header using Pyfiglet.
    The banner adapts to terminal width and applies a Nord frost gradient.
    """
    term_width, _ = shutil.get_terminal_size((80, 24))
    font_to_use = "slant"
    if term_width < 40:
        font_to_use = "mini"
    elif term_width < 60:
        font_to_use = "small"
    try:
        fig = pyfiglet.Figlet(font=font_to_use, width=min(term_width - 10, 120))
        ascii_art = fig.renderText(title)
    except pyfiglet.FigletError:
        ascii_art = f"  {title}  "

    ascii_lines = [line for line in ascii_art.splitlines() if line.strip()]
    colors = NordColors.get_frost_gradient(len(ascii_lines))
    combined_text = Text()
    for i, line in enumerate(ascii_lines):
        combined_text.append(Text(line, style=f"bold {colors[i % len(colors)]}"))
        if i < len(ascii_lines) - 1:
            combined_text.append("\n")

    return Panel(
        combined_text,
        border_style=Style(color=NordColors.FROST_1),
        padding=(1, 2),
        title=Text(f"v{VERSION}", style=f"bold {NordColors.SNOW_STORM_2}"),
        title_align="right",
        subtitle=Text(APP_SUBTITLE, style=f"bold {NordColors.SNOW_STORM_1}"),
        subtitle_align="center",
        box=box.ROUNDED,
    )


def print_message(
    text: str,
    style: str = NordColors.FROST_2,
    prefix: str = "•",
    level: int = logging.INFO,
) -> None:
    """Print a styled message to the console and mirror it to the log."""
    console.print(f"[{style}]{prefix} {escape(text)}[/{style}]")
    logger.log(level, text, extra={"printed": True})


def print_step(text: str) -> None:
    print_message(text, NordColors.FROST_3, "➜")


def print_success(text: str) -> None:
    print_message(text, NordColors.GREEN, "✓")


def print_warning(text: str) -> None:
    print_message(text, NordColors.YELLOW, "⚠", logging.WARNING)


def print_error(text: str) -> None:
    print_message(text, NordColors.RED, "✗", logging.ERROR)


def print_section(title: str) -> None:
    """Print a section rule for the step that is about to run."""
    console.print()
    console.rule(f"[bold {NordColors.FROST_2}]{title}[/]", style=NordColors.FROST_4)
    logger.info(f"--- {title} ---")


def display_panel(
    message: str, style: str = NordColors.FROST_2, title: Optional[str] = None
) -> None:
    """Display command output inside a rounded panel."""
    panel = Panel(
        Text(message),
        border_style=style,
        padding=(1, 2),
        title=f"[bold {style}]{title}[/]" if title else None,
        box=box.ROUNDED,
    )
    console.print(panel)
