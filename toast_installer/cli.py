"""
Command-line entry point for the Toast node installer.
"""

import os
import sys

import click
from rich.traceback import install as install_rich_traceback

from toast_installer import ui
from toast_installer.config import VERSION, AppConfig
from toast_installer.git_sync import commit_and_push
from toast_installer.menu import MainMenu
from toast_installer.ui import NordColors, print_error, print_message, print_warning

install_rich_traceback(show_locals=False)


def check_root() -> bool:
    if os.geteuid() != 0:
        print_error("This script must be run with root privileges!")
        print_message("Run with: sudo toast-installer", NordColors.YELLOW)
        return False
    return True


def run(commit: bool) -> int:
    config = AppConfig.from_env()
    ui.setup_logging(config.LOG_FILE)

    if commit:
        return commit_and_push()
    if not check_root():
        return 1
    return MainMenu(config).run()


@click.command()
@click.option(
    "--commit", is_flag=True, help="Commit and push local changes, then exit."
)
@click.version_option(VERSION, prog_name="toast-installer")
def main(commit: bool) -> None:
    """Interactive installer for a Pterodactyl Wings node."""
    try:
        code = run(commit)
    except KeyboardInterrupt:
        print_warning("Process interrupted by user")
        code = 130
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        ui.console.print_exception()
        code = 1
    sys.exit(code)
