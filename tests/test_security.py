from toast_installer.state import SessionState, StepStatus
from toast_installer.steps import SecurityHardener
from toast_installer.steps.security import parse_ssh_port, rewrite_port_directive


def hardener(config, shell, prompter, fetcher):
    return SecurityHardener(config, shell, prompter, fetcher)


def test_rewrite_port_directive_handles_commented_lines():
    text = "#Port 22\nListenAddress 0.0.0.0\n##Port 2022\n"
    assert rewrite_port_directive(text, 2200) == (
        "Port 2200\nListenAddress 0.0.0.0\nPort 2200\n"
    )


def test_rewrite_port_directive_ignores_other_directives():
    text = "GatewayPorts no\nPort 22\n"
    assert rewrite_port_directive(text, 4000) == "GatewayPorts no\nPort 4000\n"


def test_parse_ssh_port():
    assert parse_ssh_port("PermitRootLogin no\nPort 2200\n") == 2200
    assert parse_ssh_port("#Port 22\n") == 22
    assert parse_ssh_port("PermitRootLogin no\n") is None


def test_harden_ssh_declined(config, shell, make_prompter, fetcher, output):
    state = SessionState()
    result = hardener(config, shell, make_prompter("n\n"), fetcher).harden_ssh(state)
    assert result.status is StepStatus.SKIPPED
    assert state.ssh_port is None
    assert shell.commands == []
    assert "Skipping SSH hardening." in output()


def test_harden_ssh_rewrites_config_and_keeps_backup(
    config, shell, make_prompter, fetcher
):
    before = config.SSHD_CONFIG.read_text()
    state = SessionState()
    prompter = make_prompter("y\nabc\n22\n2200\n")
    result = hardener(config, shell, prompter, fetcher).harden_ssh(state)

    assert result.status is StepStatus.SUCCEEDED
    assert state.ssh_port == 2200
    assert config.SSHD_CONFIG_BACKUP.read_text() == before
    assert "Port 2200\n" in config.SSHD_CONFIG.read_text()
    assert "#Port 22" not in config.SSHD_CONFIG.read_text()
    assert shell.ran(["systemctl", "restart", "sshd"])


def test_harden_ssh_second_run_does_not_overwrite_backup(
    config, shell, make_prompter, fetcher
):
    before = config.SSHD_CONFIG.read_text()
    state = SessionState()
    hardener(config, shell, make_prompter("y\n2200\n"), fetcher).harden_ssh(state)
    hardener(config, shell, make_prompter("y\n2300\n"), fetcher).harden_ssh(state)

    assert config.SSHD_CONFIG_BACKUP.read_text() == before
    assert state.ssh_port == 2300


def test_harden_ssh_reports_inactive_service(config, shell, make_prompter, fetcher):
    shell.on("systemctl is-active --quiet sshd", returncode=3)
    state = SessionState()
    result = hardener(config, shell, make_prompter("y\n2200\n"), fetcher).harden_ssh(
        state
    )
    assert result.status is StepStatus.FAILED
    assert state.ssh_port == 2200


def test_firewall_uses_port_from_ssh_step(config, shell, make_prompter, fetcher):
    state = SessionState()
    steps = hardener(config, shell, make_prompter("y\n2200\ny\n"), fetcher)
    steps.harden_ssh(state)
    result = steps.configure_firewall(state)

    assert result.status is StepStatus.SUCCEEDED
    assert shell.ran(["ufw", "allow", "2200/tcp"])
    assert not shell.ran(["ufw", "allow", "22/tcp"])
    assert shell.ran(["ufw", "allow", "8080/tcp"])
    assert shell.ran(["ufw", "allow", "2022/tcp"])


def test_firewall_defaults_when_nothing_recorded(
    config, shell, make_prompter, fetcher, output
):
    config.SSHD_CONFIG.write_text("PermitRootLogin no\n")
    state = SessionState()
    result = hardener(config, shell, make_prompter("y\n"), fetcher).configure_firewall(
        state
    )

    assert result.status is StepStatus.SUCCEEDED
    assert shell.commands[0] == ["ufw", "--force", "reset"]
    assert shell.ran(["ufw", "allow", "22/tcp"])
    assert shell.ran(["ufw", "allow", "8080/tcp"])
    assert shell.ran(["ufw", "--force", "enable"])
    assert "Wings port not set, defaulting to 8080." in output()


def test_firewall_reads_port_from_sshd_config(config, shell, make_prompter, fetcher):
    config.SSHD_CONFIG.write_text("Port 2500\n")
    state = SessionState()
    state.agent_port = 9000
    hardener(config, shell, make_prompter("y\n"), fetcher).configure_firewall(state)

    assert shell.ran(["ufw", "allow", "2500/tcp"])
    assert shell.ran(["ufw", "allow", "9000/tcp"])


def test_firewall_fails_when_ufw_inactive(
    config, shell, make_prompter, fetcher, output
):
    shell.on("ufw status", stdout="Status: inactive")
    result = hardener(config, shell, make_prompter("y\n"), fetcher).configure_firewall(
        SessionState()
    )
    assert result.status is StepStatus.FAILED
    text = output()
    assert "Status: inactive" in text
    assert text.index("Status: inactive") < text.index(
        "UFW did not report an active status."
    )


def test_install_fail2ban(config, shell, make_prompter, fetcher):
    result = hardener(config, shell, make_prompter("y\n"), fetcher).install_fail2ban()
    assert result.status is StepStatus.SUCCEEDED
    assert shell.ran(["apt-get", "install", "-y", "fail2ban"])
    assert shell.ran(["systemctl", "enable", "--now", "fail2ban"])


def test_install_fail2ban_inactive_service(config, shell, make_prompter, fetcher):
    shell.on("systemctl is-active --quiet fail2ban", returncode=3)
    result = hardener(config, shell, make_prompter("y\n"), fetcher).install_fail2ban()
    assert result.status is StepStatus.FAILED
    assert "fail2ban" in result.reason
