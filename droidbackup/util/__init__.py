"""Utility module initialization."""

from .cancel import CancelToken
from .logging import get_logger, setup_logging
from .paths import (
    FALLBACK_DEVICE_LABEL,
    device_label_from_model,
    ensure_directory,
    format_size,
    get_invoking_user,
    get_user_home,
    is_hidden_path,
    is_writable_directory,
    relative_to_device_root,
)
from .timeutil import format_duration, format_report_date, now_local

__all__ = [
    # cancel
    "CancelToken",
    # logging
    "get_logger",
    "setup_logging",
    # paths
    "FALLBACK_DEVICE_LABEL",
    "device_label_from_model",
    "ensure_directory",
    "format_size",
    "get_invoking_user",
    "get_user_home",
    "is_hidden_path",
    "is_writable_directory",
    "relative_to_device_root",
    # timeutil
    "format_duration",
    "format_report_date",
    "now_local",
]
