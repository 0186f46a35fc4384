"""
Shared plumbing for action steps: the collaborators every step group needs and
the decorator that keeps a step's failure local to that step.
"""

import functools
from typing import Callable, List, Optional, Sequence

from toast_installer.config import AppConfig
from toast_installer.prompts import Prompter
from toast_installer.shell import Fetcher, Shell
from toast_installer.state import SetupError, StepResult
from toast_installer.ui import print_error, print_section, print_step

StepMethod = Callable[..., StepResult]


def guarded(title: str) -> Callable[[StepMethod], StepMethod]:
    """
    Print the step's section header and turn any SetupError or OSError raised
    inside it into a FAILED result, so the menu loop always regains control.
    """

    def decorator(func: StepMethod) -> StepMethod:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> StepResult:
            print_section(title)
            try:
                return func(*args, **kwargs)
            except (SetupError, OSError) as e:
                print_error(f"{title} failed: {e}")
                return StepResult.failed(str(e))

        return wrapper

    return decorator


class StepGroup:
    """Base for a family of related steps sharing config and collaborators."""

    def __init__(
        self,
        config: AppConfig,
        shell: Shell,
        prompter: Prompter,
        fetcher: Optional[Fetcher] = None,
    ) -> None:
        self.config = config
        self.shell = shell
        self.prompter = prompter
        self.fetcher = fetcher or Fetcher(timeout=config.DOWNLOAD_TIMEOUT)

    def execute(self, description: str, cmd: Sequence[str], quiet: bool = True) -> bool:
        """
        Announce and run one sub-command. A failure is reported and the caller
        carries on with its remaining sub-commands.
        """
        print_step(description)
        ok = self.shell.succeeds(cmd, capture_output=quiet)
        if not ok:
            print_error(f"Command failed: {' '.join(cmd)}")
        return ok

    def apt_install(self, description: str, packages: List[str]) -> bool:
        return self.execute(
            description, ["apt-get", "install", "-y", *packages], quiet=False
        )
