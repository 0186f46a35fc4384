"""
Extra Scripts
-------------

Sub-menu that installs the companion Pterodactyl helper scripts into the
system command directory.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from rich import box
from rich.table import Table

from toast_installer import ui
from toast_installer.config import AppConfig
from toast_installer.shell import normalize_line_endings
from toast_installer.state import StepResult
from toast_installer.steps.base import StepGroup, guarded
from toast_installer.ui import (
    NordColors,
    print_error,
    print_step,
    print_success,
    print_warning,
)


@dataclass(frozen=True)
class CompanionConfig:
    """A configuration file installed alongside a script."""

    source_url: str
    destination: Path


@dataclass(frozen=True)
class ScriptDescriptor:
    """
    One installable helper script.

    Attributes:
        display_name: Label shown in the sub-menu.
        command_name: File name under the command directory.
        source_url: Raw URL of the script source.
        companion: Optional configuration file fetched with the script.
    """

    display_name: str
    command_name: str
    source_url: str
    companion: Optional[CompanionConfig] = None


def build_script_table(config: AppConfig) -> Tuple[ScriptDescriptor, ...]:
    base = config.SCRIPTS_BASE_URL
    entries = [
        ("Ptero Monitor", "pteromonitor"),
        ("Ptero Menu", "pteromenu"),
        ("Ptero Name", "pteroname"),
        ("Ptero Status", "pterostatus"),
        ("Ptero Restart", "ptero-restart"),
        ("Ptero Watchdog", "ptero-watchdog"),
        ("Toast Script", "toast"),
    ]
    scripts = []
    for display_name, command in entries:
        companion = None
        if command == "pteromenu":
            companion = CompanionConfig(
                f"{base}/pteromenu.conf", config.PTEROMENU_CONFIG
            )
        scripts.append(
            ScriptDescriptor(display_name, command, f"{base}/{command}", companion)
        )
    return tuple(scripts)


class ScriptInstaller(StepGroup):
    """The 'Install Other Scripts' sub-menu."""

    BACK_LABEL = "Back to Main Menu"

    @property
    def scripts(self) -> Tuple[ScriptDescriptor, ...]:
        return build_script_table(self.config)

    def render_menu(self) -> None:
        table = Table(
            show_header=False,
            box=box.ROUNDED,
            title="Install Other Scripts",
            title_style=f"bold {NordColors.FROST_2}",
            border_style=NordColors.FROST_4,
        )
        table.add_column("#", style=f"bold {NordColors.FROST_4}", justify="right")
        table.add_column("Script", style=NordColors.SNOW_STORM_1)
        table.add_column("Command", style=NordColors.FROST_1)
        for idx, script in enumerate(self.scripts, 1):
            table.add_row(str(idx), script.display_name, script.command_name)
        table.add_row(str(len(self.scripts) + 1), self.BACK_LABEL, "")
        ui.console.print(table)

    def select(self) -> Optional[ScriptDescriptor]:
        """Prompt until a script or the back entry is chosen."""
        scripts = self.scripts
        while True:
            reply = self.prompter.read_text("Select a script to install")
            if reply.isdecimal():
                choice = int(reply)
                if 1 <= choice <= len(scripts):
                    return scripts[choice - 1]
                if choice == len(scripts) + 1:
                    return None
            print_warning("Invalid option. Please try again.")

    def install_file(self, url: str, destination: Path, mode: Optional[int]) -> bool:
        """
        Fetch a file, strip carriage returns and write it to disk.

        Args:
            url: Source URL
            destination: Target path; parent directories are created
            mode: Permission bits to apply, or None to keep the default

        Returns:
            bool: True if the file exists afterwards
        """
        data = normalize_line_endings(self.fetcher.fetch_bytes(url))
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(data)
        if mode is not None:
            os.chmod(destination, mode)
        return destination.is_file()

    def install_script(self, script: ScriptDescriptor) -> StepResult:
        """
        Install one script and, when it has one, its companion config.

        Args:
            script: The table entry to install

        Returns:
            StepResult: Outcome of the script install itself
        """
        target = self.config.BIN_DIR / script.command_name
        print_step(f"Installing '{script.command_name}' from {script.source_url}...")
        if self.install_file(script.source_url, target, 0o755):
            print_success(f"'{script.command_name}' installed successfully.")
            result = StepResult.succeeded(f"installed {target}")
        else:
            print_error(f"Failed to install '{script.command_name}'.")
            result = StepResult.failed(f"{target} missing after install")

        companion = script.companion
        if companion is not None:
            print_step(f"Installing configuration for {script.display_name}...")
            if self.install_file(companion.source_url, companion.destination, None):
                print_success(
                    f"Configuration file installed to {companion.destination}."
                )
            else:
                print_error("Failed to install configuration file.")
        return result

    @guarded("Install Other Scripts")
    def run(self) -> StepResult:
        """Show the script sub-menu and install the chosen entry."""
        self.render_menu()
        script = self.select()
        if script is None:
            return StepResult.skipped()
        if not self.prompter.confirm(
            f"Install '{script.display_name}' as '{script.command_name}'?"
        ):
            print_warning(f"Skipping '{script.command_name}'.")
            return StepResult.skipped()
        return self.install_script(script)
