"""Enumerates the device files a backup run has to consider."""

from pathlib import Path
from typing import Iterable, List, Tuple

from ..backup.models import RemoteFileEntry
from ..util.logging import get_logger
from ..util.paths import is_hidden_path, relative_to_device_root

logger = get_logger(__name__)


class ScanResult:
    """Entries found on the device, paired with their path relative to the device root."""

    def __init__(self):
        self.entries: List[Tuple[str, RemoteFileEntry]] = []
        self.total_size = 0
        self.hidden_dropped = 0

    def add_entry(self, relative_path: str, entry: RemoteFileEntry):
        self.entries.append((relative_path, entry))
        self.total_size += entry.size

    @property
    def total_files(self) -> int:
        return len(self.entries)


class DeviceScanner:
    """Lists source folders on the device and maps them onto the backup layout."""

    def __init__(self, device, device_root: str = "/sdcard"):
        self.device = device
        self.device_root = device_root.rstrip("/") or "/"

    def source_roots(self, folder_names: Iterable[str]) -> List[str]:
        """``DCIM`` becomes ``/sdcard/DCIM``; absolute names are kept as given."""
        roots = []
        for name in folder_names:
            name = name.strip()
            if not name:
                continue
            if name.startswith("/"):
                roots.append(name.rstrip("/"))
            else:
                roots.append(f"{self.device_root.rstrip('/')}/{name.strip('/')}")
        return roots

    def relative_path(self, remote_path: str) -> str:
        return relative_to_device_root(remote_path, self.device_root)

    def local_path(self, destination_root: Path, relative_path: str) -> Path:
        return destination_root / relative_path

    def scan(self, source_roots: Iterable[str]) -> ScanResult:
        """List every regular, non-hidden file under ``source_roots``.

        Enumeration errors from the device propagate; an empty listing is
        simply an empty result.
        """
        result = ScanResult()
        roots = list(source_roots)
        seen = set()

        logger.info(f"Scanning {len(roots)} folders on the device")
        for entry in self.device.list_files(roots):
            if not entry.remote_path.strip():
                continue

            relative_path = self.relative_path(entry.remote_path)
            if self._should_skip_path(relative_path):
                result.hidden_dropped += 1
                continue

            # overlapping roots list the same file twice
            if relative_path in seen:
                continue
            seen.add(relative_path)

            result.add_entry(relative_path, entry)

        if result.hidden_dropped:
            logger.debug(f"Dropped {result.hidden_dropped} hidden entries returned by the device")
        logger.info(f"Found {result.total_files} files on the device")

        return result

    def _should_skip_path(self, relative_path: str) -> bool:
        """Hidden files and anything inside a hidden folder are never backed up."""
        return is_hidden_path(relative_path) or relative_path in ("", ".", "..")
