"""Menu-selectable provisioning steps, grouped by concern."""

from toast_installer.steps.base import StepGroup, guarded
from toast_installer.steps.scripts import ScriptDescriptor, ScriptInstaller
from toast_installer.steps.security import SecurityHardener
from toast_installer.steps.services import ServiceInstaller
from toast_installer.steps.system import SystemUpdater

__all__ = [
    "StepGroup",
    "guarded",
    "ScriptDescriptor",
    "ScriptInstaller",
    "SecurityHardener",
    "ServiceInstaller",
    "SystemUpdater",
]
