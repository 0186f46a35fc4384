"""
Repository Sync
---------------

The ``--commit`` side task: stage everything in the current work tree, commit
it with an operator-supplied message and push to ``origin main``.
"""

from pathlib import Path
from typing import List, Optional, Tuple

from toast_installer.prompts import Prompter
from toast_installer.shell import Shell
from toast_installer.state import ExecutionError
from toast_installer.ui import (
    print_error,
    print_section,
    print_step,
    print_success,
    print_warning,
)

REMOTE = "origin"
BRANCH = "main"
OPERATION_TIMEOUT = 120


def run_git_command(
    shell: Shell, args: List[str], cwd: Optional[Path] = None
) -> Tuple[int, str]:
    """
    Execute a git command, optionally in ``cwd``.

    Returns:
        A tuple containing (exit_code, output).
    """
    cmd = ["git"]
    if cwd is not None:
        cmd += ["-C", str(cwd)]
    result = shell.run(cmd + args, timeout=OPERATION_TIMEOUT)
    output = (result.stdout or "").strip() or (result.stderr or "").strip()
    return result.returncode, output


def commit_and_push(
    shell: Optional[Shell] = None,
    prompter: Optional[Prompter] = None,
    cwd: Optional[Path] = None,
) -> int:
    """Commit and push local changes; returns the process exit status."""
    shell = shell or Shell()
    prompter = prompter or Prompter()
    print_section("Commit and Push Changes")

    try:
        code, _ = run_git_command(shell, ["rev-parse", "--is-inside-work-tree"], cwd)
        if code != 0:
            print_error("Not a git repository. Run --commit from the repo root.")
            return 1

        code, _ = run_git_command(shell, ["diff-index", "--quiet", "HEAD", "--"], cwd)
        if code == 0:
            print_success("No changes to commit.")
            return 0

        message = ""
        while not message:
            message = prompter.read_text("Enter commit message")
            if not message:
                print_warning("Commit message cannot be empty.")

        print_step("Staging all changes...")
        code, output = run_git_command(shell, ["add", "."], cwd)
        if code != 0:
            print_error(f"git add failed: {output}")
            return 1

        print_step("Committing changes...")
        code, output = run_git_command(shell, ["commit", "-m", message], cwd)
        if code != 0:
            print_error(f"git commit failed: {output}")
            return 1

        print_step(f"Pushing to {REMOTE} {BRANCH}...")
        code, output = run_git_command(shell, ["push", REMOTE, BRANCH], cwd)
        if code != 0:
            print_error(
                "Failed to push changes to GitHub. You may need to enter your PAT."
            )
            return 1
    except (ExecutionError, EOFError) as e:
        print_error(f"Git sync aborted: {e}")
        return 1

    print_success("Changes pushed successfully.")
    return 0
