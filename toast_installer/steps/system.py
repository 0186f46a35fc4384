"""
System Steps
------------

Package updates, swap, utility bundle and unattended upgrades.
"""

from toast_installer.state import StepResult
from toast_installer.steps.base import StepGroup, guarded
from toast_installer.ui import (
    display_panel,
    print_error,
    print_step,
    print_success,
    print_warning,
)

AUTO_UPGRADES_CONTENT = (
    'APT::Periodic::Update-Package-Lists "1";\n'
    'APT::Periodic::Unattended-Upgrade "1";\n'
    'APT::Periodic::AutocleanInterval "7";\n'
)


class SystemUpdater(StepGroup):
    """Steps that manage packages and basic system resources."""

    @guarded("System Update & Dependencies")
    def update_system(self) -> StepResult:
        """
        Refresh package lists, upgrade installed packages and install the
        base dependencies.

        Returns:
            StepResult: SUCCEEDED when the dependency install exits 0
        """
        if not self.prompter.confirm(
            "Update system packages and install dependencies?"
        ):
            print_warning("Skipping system update.")
            return StepResult.skipped()

        self.execute(
            "Updating package lists...", ["apt-get", "update", "-y"], quiet=False
        )
        self.execute(
            "Upgrading existing packages...", ["apt-get", "upgrade", "-y"], quiet=False
        )
        if not self.apt_install(
            "Installing required dependencies...", self.config.BASE_PACKAGES
        ):
            print_error("Dependency installation failed. Check the apt output above.")
            return StepResult.failed("dependency installation failed")

        print_success("System update and dependency installation complete.")
        return StepResult.succeeded("system updated")

    def swap_active(self) -> bool:
        """
        Check whether any swap device or file is in use.

        Returns:
            bool: True if ``swapon --show`` lists anything
        """
        return bool(self.shell.output(["swapon", "--show"]))

    @guarded("Configure Swap File")
    def configure_swap(self) -> StepResult:
        """
        Create, enable and persist a swap file unless swap is already active.

        Returns:
            StepResult: SKIPPED when swap exists, FAILED when swapon fails
        """
        if not self.prompter.confirm("Configure a swap file?"):
            print_warning("Skipping swap file configuration.")
            return StepResult.skipped()

        if self.swap_active():
            print_warning("Swap space is already active. Skipping.")
            return StepResult.skipped("swap already active")

        size_gb = self.prompter.read_positive_int(
            "Enter swap size in Gigabytes", self.config.DEFAULT_SWAP_SIZE_GB
        )
        swap_file = str(self.config.SWAP_FILE)

        self.execute(
            f"Creating a {size_gb}G swap file...",
            ["fallocate", "-l", f"{size_gb}G", swap_file],
        )
        self.execute(
            "Restricting swap file permissions...", ["chmod", "600", swap_file]
        )
        self.execute("Formatting swap file...", ["mkswap", swap_file])
        if not self.execute("Enabling swap file...", ["swapon", swap_file]):
            print_error("Swap file could not be enabled. Check 'dmesg' for details.")
            return StepResult.failed("swapon failed")

        # An fstab entry for a swap file that never activated would break boot.
        print_step("Making swap file permanent...")
        with open(self.config.FSTAB, "a") as f:
            f.write(f"{swap_file} none swap sw 0 0\n")

        print_success("Swap file created and enabled.")
        memory = self.shell.output(["free", "-h"])
        if memory:
            display_panel(memory, title="Memory")
        return StepResult.succeeded(f"{size_gb}G swap enabled")

    @guarded("Install Common Utilities")
    def install_common_utils(self) -> StepResult:
        """Install the operator utility bundle."""
        packages = self.config.UTILITY_PACKAGES
        if not self.prompter.confirm(
            f"Install helpful utilities ({', '.join(packages)})?"
        ):
            print_warning("Skipping utility installation.")
            return StepResult.skipped()

        if not self.apt_install("Installing utilities...", packages):
            return StepResult.failed("utility installation failed")
        print_success("Common utilities installed.")
        return StepResult.succeeded("utilities installed")

    @guarded("Configure Automatic Security Updates")
    def configure_auto_updates(self) -> StepResult:
        """
        Install unattended-upgrades and write the periodic apt directives.

        Returns:
            StepResult: SUCCEEDED once the directives file is written
        """
        if not self.prompter.confirm("Enable automatic security updates?"):
            print_warning("Skipping automatic updates configuration.")
            return StepResult.skipped()

        self.apt_install(
            "Installing unattended-upgrades package...", ["unattended-upgrades"]
        )
        print_step("Configuring auto-upgrades...")
        self.config.AUTO_UPGRADES_FILE.parent.mkdir(parents=True, exist_ok=True)
        self.config.AUTO_UPGRADES_FILE.write_text(AUTO_UPGRADES_CONTENT)

        print_success("Automatic security updates have been enabled.")
        return StepResult.succeeded("auto-upgrades configured")
