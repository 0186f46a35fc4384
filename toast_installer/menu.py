"""
Main Menu
---------

The dispatch loop: render the numbered action list, read a selection, run the
matching action and come back, whatever the action's outcome.
"""

import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from rich import box
from rich.table import Table

from toast_installer import ui
from toast_installer.config import AppConfig
from toast_installer.prompts import Prompter
from toast_installer.shell import Fetcher, Shell
from toast_installer.state import SessionState, StepResult, StepStatus
from toast_installer.steps import (
    ScriptInstaller,
    SecurityHardener,
    ServiceInstaller,
    SystemUpdater,
)
from toast_installer.ui import NordColors, print_success, print_warning

EXIT_KEY = "exit"

HELP_TEXT: Tuple[Tuple[str, str], ...] = (
    (
        "Update System",
        "Synchronizes and upgrades all system packages to their latest versions.",
    ),
    (
        "Install Docker",
        "Installs the Docker container engine, which Wings uses to run game "
        "servers in isolated environments.",
    ),
    (
        "Harden SSH",
        "Changes the default SSH port (22) to a custom one, reducing exposure "
        "to automated bots that scan for open SSH ports.",
    ),
    (
        "Install Wings",
        "Installs the Pterodactyl Wings daemon, which connects this node to "
        "your control panel.",
    ),
    (
        "Configure Firewall",
        "Sets up UFW to block all incoming traffic except SSH and the Wings ports.",
    ),
    (
        "Install Fail2ban",
        "Bans IP addresses that repeatedly fail to log in.",
    ),
    (
        "Configure Swap",
        "Creates a swap file so servers do not crash when physical RAM runs out.",
    ),
    (
        "Install Common Utilities",
        "Installs htop, ncdu, and zip/unzip.",
    ),
    (
        "Auto Security Updates",
        "Installs security patches automatically to keep the node secure.",
    ),
    (
        "Performance Tuning",
        "Applies a tuned profile optimized for virtualization and network throughput.",
    ),
    (
        "Install Other Scripts",
        "Downloads and installs the companion Pterodactyl helper scripts.",
    ),
)


@dataclass(frozen=True)
class Action:
    """A menu entry: stable dispatch key, display label and handler."""

    key: str
    label: str
    handler: Optional[Callable[[], StepResult]]


class MainMenu:
    """Owns the session state and the action table for one installer run."""

    def __init__(
        self,
        config: AppConfig,
        prompter: Optional[Prompter] = None,
        shell: Optional[Shell] = None,
        fetcher: Optional[Fetcher] = None,
    ) -> None:
        self.config = config
        self.prompter = prompter or Prompter()
        self.shell = shell or Shell(timeout=config.COMMAND_TIMEOUT)
        self.fetcher = fetcher or Fetcher(timeout=config.DOWNLOAD_TIMEOUT)
        self.state = SessionState()

        deps = (self.config, self.shell, self.prompter, self.fetcher)
        self.system = SystemUpdater(*deps)
        self.security = SecurityHardener(*deps)
        self.services = ServiceInstaller(*deps)
        self.scripts = ScriptInstaller(*deps)

        self.actions: Tuple[Action, ...] = self._build_actions()
        self._by_key: Dict[str, Action] = {a.key: a for a in self.actions}

    def _build_actions(self) -> Tuple[Action, ...]:
        state = self.state
        return (
            Action("run_all", "Run all core steps", self.run_core_steps),
            Action(
                "update", "Update System & Dependencies", self.system.update_system
            ),
            Action("docker", "Install Docker", self.services.install_docker),
            Action(
                "ssh", "Harden SSH Port", lambda: self.security.harden_ssh(state)
            ),
            Action(
                "wings",
                "Install Pterodactyl Wings",
                lambda: self.services.install_wings(state),
            ),
            Action(
                "firewall",
                "Configure Firewall (UFW)",
                lambda: self.security.configure_firewall(state),
            ),
            Action(
                "fail2ban",
                "Install Fail2ban (Security)",
                self.security.install_fail2ban,
            ),
            Action("swap", "Configure Swap (Stability)", self.system.configure_swap),
            Action(
                "utilities",
                "Install Common Utilities",
                self.system.install_common_utils,
            ),
            Action(
                "auto_updates",
                "Configure Auto Security Updates",
                self.system.configure_auto_updates,
            ),
            Action(
                "tuning", "Apply Performance Tuning", self.services.tune_performance
            ),
            Action("scripts", "Install Other Scripts", self.scripts.run),
            Action("help", "Help / Explain All Steps", self.show_help),
            Action(EXIT_KEY, "Exit", None),
        )

    # ----------------------------------------------------------------
    # Composite and informational actions
    # ----------------------------------------------------------------
    def run_core_steps(self) -> StepResult:
        """Run the five core steps in order; a failure does not stop the rest."""
        results = [
            self._by_key[key].handler()
            for key in ("update", "docker", "ssh", "wings", "firewall")
        ]
        failed = [r.reason for r in results if r.status is StepStatus.FAILED]
        if failed:
            return StepResult.failed("; ".join(failed))
        return StepResult.succeeded("core steps finished")

    def show_help(self) -> StepResult:
        """Show one explanation line per step and wait for Enter."""
        ui.clear_screen()
        table = Table(
            title="Help: Explanation of Steps",
            title_style=f"bold {NordColors.FROST_2}",
            box=box.ROUNDED,
            border_style=NordColors.FROST_4,
            show_lines=True,
        )
        table.add_column("Step", style=f"bold {NordColors.YELLOW}", no_wrap=True)
        table.add_column("What it does", style=NordColors.SNOW_STORM_1)
        for name, text in HELP_TEXT:
            table.add_row(name, text)
        ui.console.print(table)
        self.prompter.pause()
        return StepResult.skipped()

    # ----------------------------------------------------------------
    # Dispatch loop
    # ----------------------------------------------------------------
    def render(self) -> None:
        """Clear the screen and draw the banner and the numbered action list."""
        ui.clear_screen()
        ui.console.print(ui.create_header())
        ui.print_step(
            "This script will guide you through setting up a new Pterodactyl node."
        )
        table = Table(show_header=False, box=None, padding=(0, 1))
        table.add_column("#", style=f"bold {NordColors.FROST_4}", justify="right")
        table.add_column("Action", style=NordColors.SNOW_STORM_1)
        for idx, action in enumerate(self.actions, 1):
            table.add_row(f"{idx}.", action.label)
        ui.console.print(table)

    def select(self) -> Action:
        """Read selections until one names an action."""
        while True:
            reply = self.prompter.read_text("Please choose an option")
            if reply.isdecimal() and 1 <= int(reply) <= len(self.actions):
                return self.actions[int(reply) - 1]
            print_warning(f"Invalid option {reply}. Please try again.")

    def dispatch(self, key: str) -> StepResult:
        """
        Run the action registered under ``key``.

        Args:
            key: Stable action key, independent of the display label

        Returns:
            StepResult: Whatever the action returned
        """
        return self._by_key[key].handler()

    def report(self, result: StepResult) -> None:
        detail = f" ({result.reason})" if result.reason else ""
        if result.status is StepStatus.FAILED:
            ui.print_error(f"Step failed{detail}.")
        elif result.ok:
            print_success(f"Step succeeded{detail}.")
        print_success("Task finished. Returning to the main menu.")

    def run(self) -> int:
        """
        Loop until Exit is chosen or standard input is closed.

        Returns:
            The process exit status, 0 in both cases.
        """
        try:
            while True:
                self.render()
                action = self.select()
                if action.key == EXIT_KEY:
                    break
                result = self.dispatch(action.key)
                self.report(result)
                time.sleep(self.config.MENU_RETURN_DELAY)
        except EOFError:
            ui.console.print()
            print_warning("Input closed. Leaving the installer.")
        ui.print_message("Goodbye!", NordColors.FROST_2)
        return 0
