"""The device operations the sync engine depends on."""

from pathlib import Path
from typing import Iterable, List, Optional, Protocol, runtime_checkable

from ..backup.models import RemoteFileEntry


@runtime_checkable
class DeviceBridge(Protocol):
    """Anything that can list and pull files from a phone.

    :class:`~droidbackup.adb.device.ADBDevice` is the real implementation;
    tests use in-memory fakes.
    """

    def is_connected(self) -> bool:
        ...

    def device_label(self) -> str:
        ...

    def list_files(self, roots: Iterable[str]) -> List[RemoteFileEntry]:
        ...

    def fetch(self, remote_path: str, local_path: Path, expected_size: Optional[int] = None) -> bool:
        ...
