import io
import subprocess
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

import pytest
import requests
from rich.console import Console

from toast_installer import ui
from toast_installer.config import AppConfig
from toast_installer.prompts import Prompter
from toast_installer.shell import Shell
from toast_installer.state import DownloadError


class FakeShell(Shell):
    """Records every command and answers from a table of scripted results."""

    def __init__(self) -> None:
        super().__init__(timeout=None)
        self.commands: List[List[str]] = []
        self.responses: Dict[str, Tuple[int, str]] = {
            "ufw status": (0, "Status: active\n\nTo Action From\n"),
        }

    def on(self, cmd: str, returncode: int = 0, stdout: str = "") -> None:
        self.responses[cmd] = (returncode, stdout)

    def ran(self, cmd: Sequence[str]) -> bool:
        return list(cmd) in self.commands

    def count(self, program: str) -> int:
        return sum(1 for c in self.commands if c and c[0] == program)

    def run(
        self,
        cmd: Sequence[str],
        capture_output: bool = True,
        timeout: Optional[int] = None,
    ) -> subprocess.CompletedProcess:
        cmd = list(cmd)
        self.commands.append(cmd)
        returncode, stdout = self.responses.get(" ".join(cmd), (0, ""))
        return subprocess.CompletedProcess(cmd, returncode, stdout, "")


class FakeFetcher:
    """Serves canned bodies by URL; unknown URLs fail like a 404."""

    def __init__(self, bodies: Optional[Dict[str, Union[str, bytes]]] = None):
        self.bodies = dict(bodies or {})
        self.requested: List[str] = []

    def _body(self, url: str) -> Union[str, bytes]:
        self.requested.append(url)
        if url not in self.bodies:
            raise DownloadError(f"Failed to fetch {url}: 404 Client Error")
        return self.bodies[url]

    def fetch_bytes(self, url: str) -> bytes:
        body = self._body(url)
        return body.encode() if isinstance(body, str) else body

    def download(self, url: str, dest: Union[str, Path]) -> Path:
        body = self._body(url)
        dest = Path(dest)
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(body.encode() if isinstance(body, str) else body)
        return dest


@pytest.fixture(autouse=True)
def console(monkeypatch) -> Console:
    recording = Console(
        file=io.StringIO(), theme=ui.nord_theme, width=200, color_system=None
    )
    monkeypatch.setattr(ui, "console", recording)
    return recording


@pytest.fixture
def output(console):
    return lambda: console.file.getvalue()


@pytest.fixture
def config(tmp_path) -> AppConfig:
    etc = tmp_path / "etc"
    (etc / "ssh").mkdir(parents=True)
    (etc / "ssh" / "sshd_config").write_text(
        "Include /etc/ssh/sshd_config.d/*.conf\n#Port 22\nPermitRootLogin no\n"
    )
    (etc / "os-release").write_text(
        'PRETTY_NAME="Debian GNU/Linux 12 (bookworm)"\nVERSION_CODENAME=bookworm\n'
    )
    (etc / "fstab").write_text("UUID=abcd / ext4 defaults 0 1\n")
    return AppConfig(
        LOG_FILE=tmp_path / "log" / "toast.log",
        SSHD_CONFIG=etc / "ssh" / "sshd_config",
        SSHD_CONFIG_BACKUP=etc / "ssh" / "sshd_config.bak",
        PTERODACTYL_DIR=etc / "pterodactyl",
        WINGS_BINARY=tmp_path / "bin" / "wings",
        WINGS_UNIT_FILE=etc / "systemd" / "system" / "wings.service",
        WINGS_URL="https://example.test/wings_linux_amd64",
        WINGS_START_DELAY=0,
        APT_KEYRINGS_DIR=etc / "apt" / "keyrings",
        DOCKER_KEYRING=etc / "apt" / "keyrings" / "docker.asc",
        DOCKER_SOURCES_LIST=etc / "apt" / "sources.list.d" / "docker.list",
        DOCKER_GPG_URL="https://example.test/docker/gpg",
        OS_RELEASE=etc / "os-release",
        SWAP_FILE=tmp_path / "swapfile",
        FSTAB=etc / "fstab",
        AUTO_UPGRADES_FILE=etc / "apt" / "apt.conf.d" / "20auto-upgrades",
        SCRIPTS_BASE_URL="https://example.test/scripts",
        BIN_DIR=tmp_path / "bin",
        PTEROMENU_CONFIG=etc / "pteromenu.conf",
        MENU_RETURN_DELAY=0,
    )


@pytest.fixture
def shell() -> FakeShell:
    return FakeShell()


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def make_prompter(console):
    """Build a Prompter whose answers come from ``text``, one per line."""

    def factory(text: str = "") -> Prompter:
        return Prompter(console=console, stream=io.StringIO(text))

    return factory


class FakeResponse:
    """Stands in for requests.Response, decoding ``text`` the way requests does."""

    def __init__(self, body: bytes, status: int = 200, encoding: str = "utf-8"):
        self.content = body
        self.status = status
        self.encoding = encoding

    @property
    def text(self) -> str:
        return self.content.decode(self.encoding)

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} Client Error")

    def iter_content(self, chunk_size=1):
        for i in range(0, len(self.content), chunk_size):
            yield self.content[i : i + chunk_size]

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class FakeSession:
    """Serves one canned response per URL and records every request."""

    def __init__(self, responses: Dict[str, FakeResponse]):
        self.responses = responses
        self.calls: List[Tuple[str, dict]] = []

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        return self.responses.get(url, FakeResponse(b"", status=404))
