"""ADB file pulling utilities."""

from pathlib import Path
from typing import Optional

from tqdm import tqdm

from .device import ADBDevice, ADBError, DeviceDisconnectedError
from ..util.logging import get_logger
from ..util.paths import ensure_directory, format_size

logger = get_logger(__name__)

# large videos over USB 2 can take a while
PULL_TIMEOUT = 1800


class FilePuller:
    """Utility for pulling files from Android device via ADB."""

    def __init__(self, device: ADBDevice):
        self.device = device

    def pull_file(
        self,
        device_path: str,
        local_path: Path,
        expected_size: Optional[int] = None,
    ) -> bool:
        """Pull a single file from device to local storage.

        Returns ``False`` on any adb or local filesystem failure. A lost
        device raises :class:`DeviceDisconnectedError` instead, so the
        caller can stop trying the remaining files.
        """
        try:
            ensure_directory(local_path.parent)
        except OSError as e:
            logger.error(f"Cannot create {local_path.parent}: {e}")
            return False

        try:
            logger.debug(f"Pulling {device_path} -> {local_path}")
            self.device._run_command(["pull", device_path, str(local_path)], timeout=PULL_TIMEOUT)
        except DeviceDisconnectedError:
            raise
        except ADBError as e:
            logger.debug(f"Failed to pull {device_path}: {e}")
            return False

        if not local_path.is_file():
            logger.error(f"File was not pulled successfully: {local_path}")
            return False

        if expected_size is not None:
            self._check_size(local_path, expected_size)

        return True

    def _check_size(self, local_path: Path, expected_size: int) -> None:
        """Warn when the pulled copy differs in size from the listing."""
        try:
            local_size = local_path.stat().st_size
        except OSError as e:
            logger.debug(f"Could not stat {local_path}: {e}")
            return

        if local_size != expected_size:
            # the file may have changed on the phone between listing and pull
            logger.warning(
                f"Size mismatch for {local_path}: "
                f"device={format_size(expected_size)}, local={format_size(local_size)}"
            )


def create_pull_progress_bar(total_files: int, desc: str = "Backing up") -> tqdm:
    """Create a progress bar for file pulling operations."""
    return tqdm(
        total=total_files,
        desc=desc,
        unit="file",
        bar_format="{l_bar}{bar:30}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}]{postfix}"
    )
