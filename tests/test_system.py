from toast_installer.state import StepStatus
from toast_installer.steps import SystemUpdater
from toast_installer.steps.system import AUTO_UPGRADES_CONTENT


def updater(config, shell, prompter, fetcher):
    return SystemUpdater(config, shell, prompter, fetcher)


def test_update_system_runs_apt_sequence(config, shell, make_prompter, fetcher):
    result = updater(config, shell, make_prompter("y\n"), fetcher).update_system()
    assert result.status is StepStatus.SUCCEEDED
    assert shell.commands == [
        ["apt-get", "update", "-y"],
        ["apt-get", "upgrade", "-y"],
        ["apt-get", "install", "-y", *config.BASE_PACKAGES],
    ]


def test_update_system_result_follows_dependency_install(
    config, shell, make_prompter, fetcher
):
    shell.on("apt-get upgrade -y", returncode=100)
    result = updater(config, shell, make_prompter("y\n"), fetcher).update_system()
    assert result.status is StepStatus.SUCCEEDED

    shell.on("apt-get install -y " + " ".join(config.BASE_PACKAGES), returncode=100)
    result = updater(config, shell, make_prompter("y\n"), fetcher).update_system()
    assert result.status is StepStatus.FAILED


def test_update_system_declined(config, shell, make_prompter, fetcher, output):
    result = updater(config, shell, make_prompter("n\n"), fetcher).update_system()
    assert result.status is StepStatus.SKIPPED
    assert shell.commands == []
    assert "Skipping system update." in output()


def test_configure_swap_creates_and_persists(config, shell, make_prompter, fetcher):
    fstab_before = config.FSTAB.read_text()
    result = updater(config, shell, make_prompter("y\n8\n"), fetcher).configure_swap()

    swap_file = str(config.SWAP_FILE)
    assert result.status is StepStatus.SUCCEEDED
    assert shell.ran(["fallocate", "-l", "8G", swap_file])
    assert shell.ran(["chmod", "600", swap_file])
    assert shell.ran(["mkswap", swap_file])
    assert shell.ran(["swapon", swap_file])
    assert config.FSTAB.read_text() == (
        fstab_before + f"{swap_file} none swap sw 0 0\n"
    )


def test_configure_swap_is_skipped_when_swap_active(
    config, shell, make_prompter, fetcher, output
):
    steps = updater(config, shell, make_prompter("y\n\ny\n"), fetcher)
    steps.configure_swap()
    fstab_after_first = config.FSTAB.read_text()

    shell.on("swapon --show", stdout=f"{config.SWAP_FILE} file 4G 0B -2")
    result = steps.configure_swap()

    assert result.status is StepStatus.SKIPPED
    assert shell.count("fallocate") == 1
    assert shell.count("mkswap") == 1
    assert config.FSTAB.read_text() == fstab_after_first
    assert "Swap space is already active. Skipping." in output()


def test_configure_swap_failed_swapon_leaves_fstab(
    config, shell, make_prompter, fetcher
):
    fstab_before = config.FSTAB.read_text()
    shell.on(f"swapon {config.SWAP_FILE}", returncode=255)
    result = updater(config, shell, make_prompter("y\n\n"), fetcher).configure_swap()

    assert result.status is StepStatus.FAILED
    assert shell.ran(["fallocate", "-l", "4G", str(config.SWAP_FILE)])
    assert config.FSTAB.read_text() == fstab_before


def test_install_common_utils(config, shell, make_prompter, fetcher):
    result = updater(
        config, shell, make_prompter("y\n"), fetcher
    ).install_common_utils()
    assert result.status is StepStatus.SUCCEEDED
    assert shell.ran(["apt-get", "install", "-y", "htop", "ncdu", "unzip", "zip"])


def test_configure_auto_updates_writes_directives(
    config, shell, make_prompter, fetcher
):
    result = updater(
        config, shell, make_prompter("y\n"), fetcher
    ).configure_auto_updates()
    assert result.status is StepStatus.SUCCEEDED
    assert shell.ran(["apt-get", "install", "-y", "unattended-upgrades"])
    assert config.AUTO_UPGRADES_FILE.read_text() == AUTO_UPGRADES_CONTENT
    assert 'APT::Periodic::AutocleanInterval "7";' in AUTO_UPGRADES_CONTENT
