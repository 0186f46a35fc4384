"""
Command Execution and Downloads
-------------------------------

Every external effect of the installer goes through ``Shell`` (subprocesses)
or ``Fetcher`` (HTTP). Steps get instances of both, so tests can replace them
with recording fakes.
"""

import logging
import subprocess
from pathlib import Path
from typing import Optional, Sequence, Union

import requests

from toast_installer.state import DownloadError, ExecutionError
from toast_installer.ui import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)


# ----------------------------------------------------------------
# Command Execution
# ----------------------------------------------------------------
class Shell:
    """Runs system commands and reports on service state."""

    def __init__(self, timeout: Optional[int] = 1800) -> None:
        self.timeout = timeout

    def run(
        self,
        cmd: Sequence[str],
        capture_output: bool = True,
        timeout: Optional[int] = None,
    ) -> subprocess.CompletedProcess:
        """
        Execute a command and return its CompletedProcess.

        A non-zero exit is logged and left to the caller to judge. A command
        that cannot be started or times out raises ExecutionError.
        """
        cmd = list(cmd)
        cmd_str = " ".join(cmd)
        logger.debug(f"Executing: {cmd_str}")
        try:
            result = subprocess.run(
                cmd,
                text=True,
                capture_output=capture_output,
                timeout=timeout or self.timeout,
            )
        except FileNotFoundError:
            raise ExecutionError(f"Command not found: {cmd[0]}")
        except subprocess.TimeoutExpired:
            raise ExecutionError(
                f"Command timed out after {timeout or self.timeout} seconds: {cmd_str}"
            )

        if result.returncode != 0:
            error_msg = f"Command failed (code {result.returncode}): {cmd_str}"
            if result.stderr:
                error_msg += f"\nError: {result.stderr.strip()}"
            logger.debug(error_msg)
        return result

    def succeeds(self, cmd: Sequence[str], capture_output: bool = True) -> bool:
        """Run a command and report whether it exited 0."""
        return self.run(cmd, capture_output=capture_output).returncode == 0

    def output(self, cmd: Sequence[str]) -> str:
        """Run a command and return its stripped stdout, empty on failure."""
        result = self.run(cmd)
        if result.returncode != 0:
            return ""
        return (result.stdout or "").strip()

    def is_active(self, service: str) -> bool:
        return self.succeeds(["systemctl", "is-active", "--quiet", service])


# ----------------------------------------------------------------
# Downloads
# ----------------------------------------------------------------
class Fetcher:
    """Thin wrapper around a requests Session used for all network fetches."""

    CHUNK_SIZE = 1024 * 1024

    def __init__(
        self, session: Optional[requests.Session] = None, timeout: int = 120
    ) -> None:
        self.session = session or requests.Session()
        self.timeout = timeout

    def fetch_bytes(self, url: str) -> bytes:
        """Fetch ``url`` as raw, undecoded bytes."""
        logger.debug(f"Fetching {url}")
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise DownloadError(f"Failed to fetch {url}: {e}")
        return response.content

    def download(self, url: str, dest: Union[str, Path]) -> Path:
        """Stream ``url`` into ``dest``, removing a partial file on failure."""
        dest = Path(dest)
        logger.debug(f"Downloading {url} to {dest}")
        try:
            with self.session.get(url, stream=True, timeout=self.timeout) as response:
                response.raise_for_status()
                dest.parent.mkdir(parents=True, exist_ok=True)
                with open(dest, "wb") as f:
                    for chunk in response.iter_content(chunk_size=self.CHUNK_SIZE):
                        if chunk:
                            f.write(chunk)
        except requests.RequestException as e:
            if dest.exists():
                dest.unlink()
            raise DownloadError(f"Failed to download {url}: {e}")
        logger.debug(f"Download complete: {dest}")
        return dest


def normalize_line_endings(data: bytes) -> bytes:
    """Strip the carriage return in front of every line ending."""
    return data.replace(b"\r\n", b"\n").removesuffix(b"\r")
