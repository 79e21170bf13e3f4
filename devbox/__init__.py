"""devbox-setup -- provision a containerised Claude Code workspace on Arch Linux."""

__version__ = "0.1.0"
