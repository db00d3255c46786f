"""Shared test doubles."""

from pathlib import Path
from typing import Dict, Iterable, Optional

import pytest

from droidbackup.backup.models import RemoteFileEntry


class FakeBridge:
    """In-memory phone: remote path -> file contents.

    It does not filter hidden paths itself, so the scanner's own
    filtering is what keeps them out of a run.
    """

    def __init__(
        self,
        files: Dict[str, bytes],
        label: str = "Pixel_7",
        unfetchable: Iterable[str] = (),
        disconnect_after: Optional[int] = None,
    ):
        self.files = dict(files)
        self.label = label
        self.unfetchable = set(unfetchable)
        self.disconnect_after = disconnect_after
        self.connected = True
        self.fetch_calls = []
        self.listed_roots = None

    def is_connected(self) -> bool:
        return self.connected

    def device_label(self) -> str:
        return self.label

    def list_files(self, roots):
        self.listed_roots = list(roots)
        prefixes = [root.rstrip("/") + "/" for root in self.listed_roots]
        return [
            RemoteFileEntry(size=len(content), modified_time=1700000000, remote_path=path)
            for path, content in self.files.items()
            if any(path.startswith(prefix) for prefix in prefixes)
        ]

    def fetch(self, remote_path: str, local_path: Path, expected_size=None) -> bool:
        self.fetch_calls.append(remote_path)
        if self.disconnect_after is not None and len(self.fetch_calls) > self.disconnect_after:
            self.connected = False
        if not self.connected or remote_path in self.unfetchable:
            return False
        local_path.write_bytes(self.files[remote_path])
        return True


@pytest.fixture
def make_bridge():
    """Factory for :class:`FakeBridge` instances."""
    return FakeBridge
