"""Toast: an interactive Pterodactyl Wings node installer."""

from toast_installer.config import VERSION

__version__ = VERSION
