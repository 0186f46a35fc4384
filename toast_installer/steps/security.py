"""
Security Steps
--------------

SSH port hardening, UFW firewall and Fail2ban.
"""

import re
import shutil
from typing import Optional

from toast_installer.state import SessionState, StepResult
from toast_installer.steps.base import StepGroup, guarded
from toast_installer.ui import (
    display_panel,
    print_error,
    print_step,
    print_success,
    print_warning,
)

PORT_DIRECTIVE = re.compile(r"^#*Port .*$", re.MULTILINE)
PORT_VALUE = re.compile(r"^#*Port\s+(\d+)", re.MULTILINE)


def rewrite_port_directive(sshd_config: str, port: int) -> str:
    """Replace every (possibly commented) Port line with ``Port <port>``."""
    return PORT_DIRECTIVE.sub(f"Port {port}", sshd_config)


def parse_ssh_port(sshd_config: str) -> Optional[int]:
    """Return the first Port value in an sshd_config, commented or not."""
    match = PORT_VALUE.search(sshd_config)
    return int(match.group(1)) if match else None


class SecurityHardener(StepGroup):
    """Steps that reduce the node's exposure."""

    @guarded("SSH Hardening")
    def harden_ssh(self, state: SessionState) -> StepResult:
        """
        Move sshd to an operator-chosen port.

        Args:
            state: Session state that receives the new SSH port

        Returns:
            StepResult: SUCCEEDED if sshd is active after the restart
        """
        if not self.prompter.confirm("Change the default SSH port?"):
            print_warning("Skipping SSH hardening.")
            return StepResult.skipped()

        state.ssh_port = self.prompter.read_port(
            "Enter new SSH port",
            minimum=self.config.SSH_PORT_MIN,
            maximum=self.config.SSH_PORT_MAX,
        )
        port = state.ssh_port
        sshd_config = self.config.SSHD_CONFIG
        backup = self.config.SSHD_CONFIG_BACKUP

        if backup.exists():
            print_step(f"Keeping existing backup {backup}")
        else:
            print_step(f"Backing up {sshd_config}...")
            shutil.copy2(sshd_config, backup)

        print_step(f"Setting SSH port to {port}...")
        sshd_config.write_text(rewrite_port_directive(sshd_config.read_text(), port))

        service = self.config.SSH_SERVICE
        self.execute("Restarting SSH service...", ["systemctl", "restart", service])
        if not self.shell.is_active(service):
            print_error(
                f"SSH service failed to restart. Check 'journalctl -u {service}'."
            )
            return StepResult.failed(f"{service} is not active")

        print_success(f"SSH service restarted on port {port}.")
        print_warning(f"Use 'ssh -p {port} user@host' to connect.")
        return StepResult.succeeded(f"SSH listening on port {port}")

    def effective_ssh_port(self, state: SessionState) -> int:
        """
        Resolve the SSH port the firewall must keep open.

        Args:
            state: Session state, consulted first

        Returns:
            int: The recorded port, else the sshd_config Port, else 22
        """
        if state.ssh_port is not None:
            return state.ssh_port
        try:
            port = parse_ssh_port(self.config.SSHD_CONFIG.read_text())
        except OSError:
            port = None
        return port or self.config.DEFAULT_SSH_PORT

    def effective_agent_port(self, state: SessionState) -> int:
        """
        Resolve the Wings API port, warning when falling back to the default.

        Args:
            state: Session state, consulted first

        Returns:
            int: The recorded agent port or the default Wings port
        """
        if state.agent_port is not None:
            return state.agent_port
        default = self.config.DEFAULT_WINGS_PORT
        print_warning(f"Wings port not set, defaulting to {default}.")
        return default

    @guarded("Firewall (UFW) Configuration")
    def configure_firewall(self, state: SessionState) -> StepResult:
        """
        Reset UFW and allow only SSH and the Wings ports.

        Args:
            state: Session state holding the ports chosen earlier this run

        Returns:
            StepResult: SUCCEEDED if ``ufw status`` reports active
        """
        if not self.prompter.confirm("Configure UFW firewall?"):
            print_warning("Skipping firewall configuration.")
            return StepResult.skipped()

        self.execute("Resetting UFW to defaults...", ["ufw", "--force", "reset"])

        ssh_port = self.effective_ssh_port(state)
        self.execute(
            f"Allowing SSH on port {ssh_port}...", ["ufw", "allow", f"{ssh_port}/tcp"]
        )

        wings_port = self.effective_agent_port(state)
        sftp_port = self.config.WINGS_SFTP_PORT
        print_step(
            f"Allowing Pterodactyl Wings ports ({wings_port}/tcp, {sftp_port}/tcp)..."
        )
        for port in (wings_port, sftp_port):
            self.execute(f"Allowing {port}/tcp...", ["ufw", "allow", f"{port}/tcp"])

        self.execute("Enabling UFW...", ["ufw", "--force", "enable"])

        status = self.shell.output(["ufw", "status"])
        display_panel(status or "No status reported.", title="UFW Status")
        if "Status: active" not in status:
            print_error("UFW did not report an active status.")
            return StepResult.failed("ufw is not active")

        print_success("Firewall configured and enabled.")
        return StepResult.succeeded(
            f"allowed {ssh_port}/tcp, {wings_port}/tcp, {sftp_port}/tcp"
        )

    @guarded("Install Fail2ban")
    def install_fail2ban(self) -> StepResult:
        """Install Fail2ban and make sure its service is running."""
        if not self.prompter.confirm(
            "Install Fail2ban to protect against brute-force attacks?"
        ):
            print_warning("Skipping Fail2ban installation.")
            return StepResult.skipped()

        self.apt_install("Installing Fail2ban...", ["fail2ban"])
        self.execute(
            "Enabling and starting Fail2ban...",
            ["systemctl", "enable", "--now", "fail2ban"],
        )
        if not self.shell.is_active("fail2ban"):
            print_error(
                "Fail2ban service failed to start. Check 'journalctl -u fail2ban'."
            )
            return StepResult.failed("fail2ban is not active")

        print_success("Fail2ban is active and running.")
        return StepResult.succeeded("fail2ban active")
