"""ADB shell command execution utilities."""

import shlex
from typing import Iterable, List, Optional

from .device import ADBDevice, ADBError, EnumerationError
from ..backup.models import RemoteFileEntry
from ..util.logging import get_logger
from ..util.paths import is_hidden_path

logger = get_logger(__name__)

# size;mtime;path, one line per regular file
STAT_FORMAT = "%s;%Y;%n"


class ShellCommand:
    """Utility for executing shell commands on Android device."""

    def __init__(self, device: ADBDevice):
        self.device = device

    def execute(self, command: str, timeout: int = 30) -> str:
        """Execute a shell command on the device."""
        return self.device._run_command(["shell", command], timeout=timeout)

    def build_listing_command(self, roots: Iterable[str]) -> str:
        """One ``find`` over every root, pruning dot-directories and dot-files.

        Missing roots make ``find`` exit non-zero; ``|| true`` keeps that
        from looking like a bridge failure, so only adb-level errors raise.
        """
        quoted = " ".join(shlex.quote(root) for root in roots)
        return (
            f"find {quoted} -path '*/.*' -prune -o -type f "
            f"-exec stat -c {shlex.quote(STAT_FORMAT)} {{}} + 2>/dev/null || true"
        )

    def list_files(self, roots: Iterable[str], timeout: int = 600) -> List[RemoteFileEntry]:
        """List regular files under ``roots`` with size and modification time."""
        roots = list(roots)
        if not roots:
            return []

        try:
            output = self.execute(self.build_listing_command(roots), timeout=timeout)
        except ADBError as e:
            raise EnumerationError(f"Could not list files on the device: {e}") from e

        return self.parse_listing(output)

    def parse_listing(self, output: str) -> List[RemoteFileEntry]:
        """Parse ``stat -c '%s;%Y;%n'`` lines, keeping device order."""
        entries = []

        for line in output.split("\n"):
            entry = self._parse_listing_line(line)
            if entry is not None:
                entries.append(entry)

        return entries

    def _parse_listing_line(self, line: str) -> Optional[RemoteFileEntry]:
        line = line.replace("\r", "")
        if not line.strip():
            return None

        # paths may themselves contain ';'
        parts = line.split(";", 2)
        if len(parts) != 3 or not parts[2]:
            logger.debug(f"Ignoring unparseable listing line: {line!r}")
            return None

        size, mtime, path = parts
        try:
            entry = RemoteFileEntry(size=int(size), modified_time=int(mtime), remote_path=path)
        except ValueError:
            logger.debug(f"Ignoring listing line with bad numbers: {line!r}")
            return None

        if is_hidden_path(path):
            return None

        return entry
