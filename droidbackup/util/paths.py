"""Utility functions for path operations."""

import os
import pwd
from pathlib import Path
from typing import Optional

from ..util.logging import get_logger

logger = get_logger(__name__)

FALLBACK_DEVICE_LABEL = "My_Phone"


def ensure_directory(path: Path) -> Path:
    """Ensure directory exists, creating it if necessary."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_invoking_user() -> str:
    """Name of the user who started the program, looking through sudo."""
    sudo_user = os.environ.get("SUDO_USER")
    if sudo_user:
        return sudo_user
    return pwd.getpwuid(os.getuid()).pw_name


def get_user_home() -> Path:
    """Home directory of the invoking user.

    Under sudo, ``Path.home()`` points at root's home, so the real
    user's home is looked up from the password database instead.
    """
    sudo_user = os.environ.get("SUDO_USER")
    if sudo_user:
        try:
            return Path(pwd.getpwnam(sudo_user).pw_dir)
        except KeyError:
            logger.warning(f"Unknown SUDO_USER {sudo_user!r}, using current home")
    return Path.home()


def device_label_from_model(model: Optional[str]) -> str:
    """Turn a raw ``ro.product.model`` value into a folder-safe label."""
    label = (model or "").replace("\r", "").strip()
    if not label:
        return FALLBACK_DEVICE_LABEL
    return label.replace(" ", "_").replace("/", "_")


def relative_to_device_root(device_path: str, device_root: str) -> str:
    """Strip the device root prefix from an absolute device path.

    ``/sdcard/DCIM/a.jpg`` with root ``/sdcard`` becomes ``DCIM/a.jpg``.
    Paths outside the root only lose their leading slash.
    """
    prefix = device_root.rstrip("/") + "/"
    if device_path.startswith(prefix):
        return device_path[len(prefix):]
    return device_path.lstrip("/")


def is_hidden_path(path: str) -> bool:
    """True when any component of ``path`` starts with a dot."""
    return any(part.startswith(".") for part in path.split("/") if part)


def is_writable_directory(path: Path) -> bool:
    """Check that ``path`` is an existing directory we can create files in."""
    return path.is_dir() and os.access(path, os.W_OK | os.X_OK)


def format_size(size_bytes: int) -> str:
    """Format file size in human readable format."""
    if size_bytes == 0:
        return "0 B"

    size_names = ["B", "KB", "MB", "GB", "TB"]
    i = 0
    while size_bytes >= 1024.0 and i < len(size_names) - 1:
        size_bytes /= 1024.0
        i += 1

    return f"{size_bytes:.1f} {size_names[i]}"
