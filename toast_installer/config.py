"""
Configuration & Constants
-------------------------

Static configuration for the node installer: filesystem paths, download URLs,
package sets and timings. Paths are plain dataclass fields so the test suite
can point every file the installer touches into a scratch directory.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

APP_NAME: str = "Toast"
APP_SUBTITLE: str = "Pterodactyl Node Installer"
VERSION: str = "1.0.0"

SCRIPTS_BASE_URL: str = (
    "https://raw.githubusercontent.com/SirJBiscuit/toast-installer/main"
)
WINGS_URL: str = (
    "https://github.com/pterodactyl/wings/releases/latest/download/wings_linux_amd64"
)
DOCKER_REPO_URL: str = "https://download.docker.com/linux/debian"


@dataclass
class AppConfig:
    """Configuration for a single installer session."""

    # Logging
    LOG_FILE: Path = Path("/var/log/toast_installer.log")

    # SSH
    SSHD_CONFIG: Path = Path("/etc/ssh/sshd_config")
    SSHD_CONFIG_BACKUP: Path = Path("/etc/ssh/sshd_config.bak")
    SSH_SERVICE: str = "sshd"
    DEFAULT_SSH_PORT: int = 22
    SSH_PORT_MIN: int = 1024
    SSH_PORT_MAX: int = 65535

    # Pterodactyl Wings
    PTERODACTYL_DIR: Path = Path("/etc/pterodactyl")
    WINGS_BINARY: Path = Path("/usr/local/bin/wings")
    WINGS_UNIT_FILE: Path = Path("/etc/systemd/system/wings.service")
    WINGS_URL: str = WINGS_URL
    DEFAULT_WINGS_PORT: int = 8080
    WINGS_SFTP_PORT: int = 2022
    WINGS_START_DELAY: float = 5.0

    # Docker
    APT_KEYRINGS_DIR: Path = Path("/etc/apt/keyrings")
    DOCKER_KEYRING: Path = Path("/etc/apt/keyrings/docker.asc")
    DOCKER_SOURCES_LIST: Path = Path("/etc/apt/sources.list.d/docker.list")
    DOCKER_GPG_URL: str = f"{DOCKER_REPO_URL}/gpg"
    DOCKER_REPO_URL: str = DOCKER_REPO_URL
    OS_RELEASE: Path = Path("/etc/os-release")

    # Swap
    SWAP_FILE: Path = Path("/swapfile")
    FSTAB: Path = Path("/etc/fstab")
    DEFAULT_SWAP_SIZE_GB: int = 4

    # Unattended upgrades
    AUTO_UPGRADES_FILE: Path = Path("/etc/apt/apt.conf.d/20auto-upgrades")

    # Performance tuning
    TUNED_PROFILE: str = "virtual-host"

    # Extra scripts
    SCRIPTS_BASE_URL: str = SCRIPTS_BASE_URL
    BIN_DIR: Path = Path("/usr/local/bin")
    PTEROMENU_CONFIG: Path = Path("/etc/pteromenu.conf")

    # Timings
    COMMAND_TIMEOUT: int = 1800  # apt upgrades can be slow
    DOWNLOAD_TIMEOUT: int = 120
    MENU_RETURN_DELAY: float = 2.0

    BASE_PACKAGES: List[str] = field(
        default_factory=lambda: [
            "curl",
            "wget",
            "gnupg",
            "software-properties-common",
            "ufw",
        ]
    )
    DOCKER_PACKAGES: List[str] = field(
        default_factory=lambda: [
            "docker-ce",
            "docker-ce-cli",
            "containerd.io",
            "docker-buildx-plugin",
            "docker-compose-plugin",
        ]
    )
    UTILITY_PACKAGES: List[str] = field(
        default_factory=lambda: ["htop", "ncdu", "unzip", "zip"]
    )

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Build a config, honouring the TOAST_* environment overrides."""
        config = cls()
        log_file = os.environ.get("TOAST_LOG_FILE")
        if log_file:
            config.LOG_FILE = Path(log_file)
        base_url = os.environ.get("TOAST_SCRIPTS_BASE_URL")
        if base_url:
            config.SCRIPTS_BASE_URL = base_url.rstrip("/")
        wings_url = os.environ.get("TOAST_WINGS_URL")
        if wings_url:
            config.WINGS_URL = wings_url
        return config
