"""Backup storage layout management."""

from pathlib import Path

from ..util.logging import get_logger
from ..util.paths import device_label_from_model, is_writable_directory

logger = get_logger(__name__)


class DestinationError(Exception):
    """The backup destination cannot be created or written."""
    pass


class BackupStorage:
    """Manages the backup folder layout: ``<base>/<device label>/``."""

    def __init__(self, base_path: Path) -> None:
        """Initialize backup storage.

        Args:
            base_path: Base directory for all backups (USB mount point or desktop folder)
        """
        self.base_path = Path(base_path)

    def get_device_backup_dir(self, device_label: str) -> Path:
        """Get backup directory for a specific device.

        Args:
            device_label: Device label as returned by the bridge

        Returns:
            Path to device backup directory
        """
        return self.base_path / device_label_from_model(device_label)

    def prepare(self, device_label: str) -> Path:
        """Create the device folder and make sure we can write to it.

        Raises:
            DestinationError: If the folder cannot be created or is read-only
        """
        destination = self.get_device_backup_dir(device_label)

        try:
            destination.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DestinationError(f"Cannot create backup folder {destination}: {e}") from e

        if not is_writable_directory(destination):
            raise DestinationError(f"Backup folder is not writable: {destination}")

        logger.debug(f"Backup destination ready: {destination}")
        return destination
