"""
Service Steps
-------------

Docker Engine, the Pterodactyl Wings daemon and the tuned performance profile.
"""

import os
import time
from pathlib import Path
from typing import Dict

from toast_installer.state import SessionState, StepResult
from toast_installer.steps.base import StepGroup, guarded
from toast_installer.ui import (
    print_error,
    print_step,
    print_success,
    print_warning,
)

WINGS_UNIT_TEMPLATE = """\
[Unit]
Description=Pterodactyl Wings Daemon
After=docker.service
Requires=docker.service
[Service]
User=root
WorkingDirectory={working_directory}
LimitNOFILE=4096
PIDFile=/var/run/wings/daemon.pid
ExecStart={binary}
Restart=on-failure
StartLimitInterval=600
[Install]
WantedBy=multi-user.target
"""


def render_wings_unit(binary: Path, working_directory: Path) -> str:
    """
    Render the systemd unit for the Wings daemon.

    Args:
        binary: Path of the wings executable
        working_directory: Directory holding config.yml

    Returns:
        str: The unit file contents
    """
    return WINGS_UNIT_TEMPLATE.format(
        binary=binary, working_directory=working_directory
    )


def parse_os_release(text: str) -> Dict[str, str]:
    """Parse /etc/os-release KEY=value lines, dropping surrounding quotes."""
    values: Dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        values[key] = value.strip().strip('"').strip("'")
    return values


class ServiceInstaller(StepGroup):
    """Steps that install and start long-running services."""

    def docker_source_line(self) -> str:
        """
        Build the apt source entry for the Docker repository.

        Returns:
            str: A ``deb [...] <repo> <codename> stable`` line
        """
        arch = self.shell.output(["dpkg", "--print-architecture"]) or "amd64"
        release = parse_os_release(self.config.OS_RELEASE.read_text())
        codename = release.get("VERSION_CODENAME", "")
        if not codename:
            print_warning("Could not determine the distribution codename.")
        return (
            f"deb [arch={arch} signed-by={self.config.DOCKER_KEYRING}] "
            f"{self.config.DOCKER_REPO_URL} {codename} stable\n"
        )

    @guarded("Docker Installation")
    def install_docker(self) -> StepResult:
        """
        Add Docker's apt repository, install the engine and start it.

        Returns:
            StepResult: SUCCEEDED if the docker service is active
        """
        if not self.prompter.confirm("Install Docker Engine?"):
            print_warning("Skipping Docker installation.")
            return StepResult.skipped()

        print_step("Setting up Docker repository...")
        self.execute(
            "Creating apt keyring directory...",
            ["install", "-m", "0755", "-d", str(self.config.APT_KEYRINGS_DIR)],
        )
        print_step("Fetching Docker signing key...")
        self.fetcher.download(self.config.DOCKER_GPG_URL, self.config.DOCKER_KEYRING)
        os.chmod(self.config.DOCKER_KEYRING, 0o644)

        sources_list = self.config.DOCKER_SOURCES_LIST
        sources_list.parent.mkdir(parents=True, exist_ok=True)
        sources_list.write_text(self.docker_source_line())

        self.execute(
            "Updating package lists for Docker...",
            ["apt-get", "update", "-y"],
            quiet=False,
        )
        self.apt_install("Installing Docker packages...", self.config.DOCKER_PACKAGES)
        self.execute(
            "Enabling and starting Docker service...",
            ["systemctl", "enable", "--now", "docker"],
        )

        if not self.shell.is_active("docker"):
            print_error("Docker service failed to start. Check 'journalctl -u docker'.")
            return StepResult.failed("docker is not active")

        version = self.shell.output(["docker", "--version"])
        print_success(f"Docker is active and running. {version}".strip())
        return StepResult.succeeded(version or "docker active")

    @guarded("Pterodactyl Wings Installation")
    def install_wings(self, state: SessionState) -> StepResult:
        """
        Install the Wings daemon with the configuration pasted from the panel.

        Args:
            state: Session state that receives the Wings port

        Returns:
            StepResult: FAILED on an empty paste or an inactive service
        """
        if not self.prompter.confirm("Install Pterodactyl Wings?"):
            print_warning("Skipping Wings installation.")
            return StepResult.skipped()

        state.agent_port = self.prompter.read_port(
            "Enter Wings listen port",
            default=self.config.DEFAULT_WINGS_PORT,
            minimum=state.AGENT_PORT_RANGE[0],
            maximum=state.AGENT_PORT_RANGE[1],
        )

        print_step("Creating required directories...")
        config_dir = self.config.PTERODACTYL_DIR
        config_dir.mkdir(parents=True, exist_ok=True)

        print_warning(
            "Go to your Pterodactyl Panel, create a Node, and copy the configuration."
        )
        print_warning("Paste the contents of 'config.yml' below, then press Ctrl+D.")
        pasted = self.prompter.read_until_eof()
        config_file = config_dir / "config.yml"
        config_file.write_text(pasted)
        if not pasted.strip():
            print_error("Config file is empty. Aborting.")
            return StepResult.failed("empty config.yml")

        print_step("Downloading Wings...")
        binary = self.fetcher.download(self.config.WINGS_URL, self.config.WINGS_BINARY)
        os.chmod(binary, 0o755)

        print_step("Creating Wings systemd service...")
        unit_file = self.config.WINGS_UNIT_FILE
        unit_file.parent.mkdir(parents=True, exist_ok=True)
        unit_file.write_text(render_wings_unit(binary, config_dir))

        self.execute("Reloading systemd units...", ["systemctl", "daemon-reload"])
        self.execute(
            "Enabling and starting Wings service...",
            ["systemctl", "enable", "--now", "wings"],
        )
        print_step("Waiting for Wings to start...")
        time.sleep(self.config.WINGS_START_DELAY)

        if not self.shell.is_active("wings"):
            print_error("Wings service failed to start. Check 'journalctl -u wings'.")
            return StepResult.failed("wings is not active")

        print_success("Wings service is active and running.")
        return StepResult.succeeded(f"wings listening on port {state.agent_port}")

    @guarded("Apply Performance Tuning")
    def tune_performance(self) -> StepResult:
        """Install tuned and apply the configured profile."""
        if not self.prompter.confirm("Apply a performance tuning profile?"):
            print_warning("Skipping performance tuning.")
            return StepResult.skipped()

        profile = self.config.TUNED_PROFILE
        self.apt_install("Installing tuned...", ["tuned"])
        self.execute(
            "Enabling and starting tuned service...",
            ["systemctl", "enable", "--now", "tuned"],
        )
        self.execute(
            f"Applying '{profile}' profile for network/disk performance...",
            ["tuned-adm", "profile", profile],
        )

        if not self.shell.is_active("tuned"):
            print_error("Tuned service failed to start. Check 'journalctl -u tuned'.")
            return StepResult.failed("tuned is not active")

        active = self.shell.output(["tuned-adm", "active"])
        current = ""
        for line in active.splitlines():
            if "Current active profile" in line:
                current = line.split(":", 1)[1].strip()
                break
        print_success(f"Tuned is active. Current profile: {current or 'unknown'}")
        return StepResult.succeeded(f"tuned profile {current or profile}")
