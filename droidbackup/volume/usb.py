"""Mounting and ejecting the USB drive used as a backup target."""

import os
import pwd
import subprocess
from pathlib import Path
from typing import List, Optional

from ..util.logging import get_logger
from ..util.paths import get_invoking_user

logger = get_logger(__name__)


class VolumeError(Exception):
    """Mount or unmount of the backup drive failed."""
    pass


class UsbVolume:
    """The first USB disk's first partition, mounted at a fixed folder.

    Mounting needs root. The drive is mounted with the invoking user's
    uid/gid so the backup files end up owned by them and not by root.
    """

    def __init__(self, mount_point: Path, owner: Optional[str] = None):
        self.mount_point = Path(mount_point)
        self.owner = owner or get_invoking_user()

    def _run(self, args: List[str], timeout: int = 60) -> subprocess.CompletedProcess:
        logger.debug(f"Running: {' '.join(args)}")
        try:
            return subprocess.run(args, capture_output=True, text=True, timeout=timeout)
        except FileNotFoundError as e:
            raise VolumeError(f"Required tool not found: {args[0]}") from e
        except subprocess.TimeoutExpired as e:
            raise VolumeError(f"Timed out running {args[0]}") from e

    def find_disk(self) -> Optional[str]:
        """Path of the first whole disk attached over USB, e.g. ``/dev/sdb``."""
        result = self._run(["lsblk", "-p", "-o", "NAME,TRAN,TYPE", "-n"])
        if result.returncode != 0:
            raise VolumeError(f"Could not list block devices: {result.stderr.strip()}")

        for line in result.stdout.splitlines():
            parts = line.split()
            if len(parts) == 3 and parts[1] == "usb" and parts[2] == "disk":
                return parts[0]
        return None

    def find_partition(self) -> str:
        """First partition of the USB disk; only the first one is ever used."""
        disk = self.find_disk()
        if disk is None:
            raise VolumeError("Could not find a USB drive.")

        partition = f"{disk}1"
        if not Path(partition).is_block_device():
            raise VolumeError("Found a USB drive, but could not find a partition on it.")
        return partition

    def is_mounted(self) -> bool:
        return os.path.ismount(self.mount_point)

    def _owner_ids(self):
        try:
            entry = pwd.getpwnam(self.owner)
        except KeyError as e:
            raise VolumeError(f"Unknown user {self.owner!r}") from e
        return entry.pw_uid, entry.pw_gid

    def mount(self) -> Path:
        """Mount the drive and return the mount point.

        Raises:
            VolumeError: If no drive is found or the mount fails
        """
        partition = self.find_partition()

        # a stale mount from a previous run would hide the new one
        self._run(["umount", str(self.mount_point)])

        uid, gid = self._owner_ids()
        if not self.mount_point.is_dir():
            try:
                self.mount_point.mkdir(parents=True, exist_ok=True)
                os.chown(self.mount_point, uid, gid)
            except OSError as e:
                raise VolumeError(f"Could not create mount point {self.mount_point}: {e}") from e

        result = self._run(["mount", "-o", f"uid={uid},gid={gid}", partition, str(self.mount_point)])
        if result.returncode != 0 or not self.is_mounted():
            self._remove_mount_point()
            detail = result.stderr.strip()
            raise VolumeError(
                "Could not get the USB drive ready for backup." + (f" ({detail})" if detail else "")
            )

        logger.info(f"Mounted {partition} at {self.mount_point}")
        return self.mount_point

    def unmount(self) -> None:
        """Eject the drive; succeeds quietly when nothing is mounted.

        Raises:
            VolumeError: If the drive is busy
        """
        if self.is_mounted():
            result = self._run(["umount", str(self.mount_point)])
            if result.returncode != 0:
                raise VolumeError(
                    "Could not eject the drive. A program may still be using it."
                )
            logger.info(f"Unmounted {self.mount_point}")

        self._remove_mount_point()

    def _remove_mount_point(self) -> None:
        try:
            self.mount_point.rmdir()
        except FileNotFoundError:
            pass
        except OSError as e:
            # not empty, so it holds real files and must stay
            logger.debug(f"Left {self.mount_point} in place: {e}")
