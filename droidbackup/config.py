"""Configuration management for DroidBackup."""

from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator
from ruamel.yaml import YAML

from .util.logging import DEFAULT_LOG_LEVEL
from .util.paths import get_user_home

DEFAULT_SOURCE_FOLDERS = [
    "DCIM",
    "Pictures",
    "Movies",
    "Download",
    "Documents",
    "Downloads",
    "WhatsApp",
    "Viber",
]


class SyncConfig(BaseModel):
    """Configuration for the device-to-host sync."""

    source_folders: List[str] = Field(
        default_factory=lambda: list(DEFAULT_SOURCE_FOLDERS),
        description="Folder names under the device root to back up"
    )
    device_root: str = Field(default="/sdcard", description="Absolute root prefix on the device")
    contact_extension: str = Field(default=".vcf", description="Extension of contact-export files")
    log_file_name: str = Field(default="backup_log.txt", description="Name of the per-run report")

    @field_validator("device_root")
    @classmethod
    def _absolute_root(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("device_root must be an absolute device path")
        return value.rstrip("/") or "/"

    @field_validator("contact_extension")
    @classmethod
    def _dotted_extension(cls, value: str) -> str:
        value = value.lower()
        return value if value.startswith(".") else f".{value}"


class DeviceConfig(BaseModel):
    """Configuration for talking to the phone."""

    poll_interval: float = Field(default=3.0, gt=0, description="Seconds between connectivity probes")
    wait_timeout: Optional[float] = Field(
        default=None, description="Give up waiting for the phone after this many seconds (None waits forever)"
    )


class DroidBackupConfig(BaseModel):
    """Main configuration for DroidBackup."""

    local_backup_dir: Path = Field(
        default_factory=lambda: get_user_home() / "Desktop" / "Android_Backups",
        description="Base directory for backups to this computer"
    )
    usb_mount_dir: Path = Field(
        default_factory=lambda: get_user_home() / "Desktop" / "Android_Backup_USB",
        description="Where the backup USB drive gets mounted"
    )

    sync: SyncConfig = Field(default_factory=SyncConfig)
    device: DeviceConfig = Field(default_factory=DeviceConfig)

    # Runtime settings
    adb_path: str = Field(default="adb", description="Path to ADB binary")
    log_level: str = Field(default=DEFAULT_LOG_LEVEL, description="Console logging level when not verbose")

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        value = value.upper()
        if value not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {value}")
        return value

    class Config:
        """Pydantic configuration."""

        validate_assignment = True


def default_config_path() -> Path:
    return get_user_home() / ".config" / "droidbackup" / "config.yaml"


def load_config(config_path: Optional[Path] = None) -> DroidBackupConfig:
    """Load configuration from file or create default."""

    if config_path is None:
        config_path = default_config_path()

    if config_path.exists():
        yaml = YAML(typ="safe")
        with open(config_path, "r") as f:
            data = yaml.load(f) or {}
        return DroidBackupConfig(**data)
    else:
        config = DroidBackupConfig()
        save_config(config, config_path)
        return config


def save_config(config: DroidBackupConfig, config_path: Optional[Path] = None) -> None:
    """Save configuration to file."""

    if config_path is None:
        config_path = default_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)

    yaml = YAML()
    yaml.default_flow_style = False

    with open(config_path, "w") as f:
        yaml.dump(config.model_dump(mode="json"), f)


def get_config() -> DroidBackupConfig:
    """Get the global configuration instance."""

    if not hasattr(get_config, "_config"):
        get_config._config = load_config()

    return get_config._config


def set_config(config: DroidBackupConfig) -> None:
    """Replace the global configuration instance."""
    get_config._config = config
