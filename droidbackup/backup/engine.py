"""Incremental device-to-host sync."""

import time
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Iterable, Optional

from ..adb.device import ADBError, DeviceDisconnectedError
from ..data.contacts import ContactsCounter
from ..util.cancel import CancelToken
from ..util.logging import get_logger
from ..util.paths import is_writable_directory
from ..util.timeutil import format_duration
from .models import BackupReport, RemoteFileEntry, SyncResultBuilder
from .report import ReportWriter
from .scanner import DeviceScanner
from .storage import DestinationError

if TYPE_CHECKING:
    from ..adb.bridge import DeviceBridge

logger = get_logger(__name__)

# (current index starting at 1, total entries, relative path just decided)
ProgressCallback = Callable[[int, int, str], None]

COPIED = "copied"
SKIPPED = "skipped"
FAILED = "failed"


class SyncEngine:
    """Mirrors device folders into a local folder, one file at a time.

    A file counts as up to date when a local file of the same byte size
    already exists. Contents are never compared, so a same-size edit on
    the phone is not picked up.
    """

    def __init__(
        self,
        bridge: "DeviceBridge",
        device_root: str = "/sdcard",
        contact_extension: str = ".vcf",
        log_file_name: str = "backup_log.txt",
        report_writer: Optional[ReportWriter] = None,
    ):
        self.bridge = bridge
        self.scanner = DeviceScanner(bridge, device_root)
        self.contacts = ContactsCounter(contact_extension)
        self.log_file_name = log_file_name
        self.report_writer = report_writer or ReportWriter()

    def sync(
        self,
        source_roots: Iterable[str],
        destination_root: Path,
        progress_callback: Optional[ProgressCallback] = None,
        cancel_token: Optional[CancelToken] = None,
        device_label: Optional[str] = None,
    ) -> BackupReport:
        """Run one backup pass and persist its log.

        Args:
            source_roots: Folder names under the device root, or absolute device paths
            destination_root: Local folder mirroring the device root
            progress_callback: Called after every file decision
            cancel_token: Checked between files; remaining files are marked failed
            device_label: Label for the report; asked from the bridge when omitted

        Returns:
            The finished report, already written to ``<destination_root>/<log file>``

        Raises:
            DestinationError: If the destination is not writable
            EnumerationError: If the device cannot list its files
        """
        started = time.monotonic()
        destination_root = Path(destination_root)
        self._check_destination(destination_root)

        if device_label is None:
            device_label = self.bridge.device_label()

        roots = self.scanner.source_roots(source_roots)
        scan = self.scanner.scan(roots)
        total = scan.total_files

        builder = SyncResultBuilder()
        disconnected = False
        cancelled = False

        logger.info(f"Backing up {total} files from {device_label} to {destination_root}")

        for index, (relative_path, entry) in enumerate(scan.entries, start=1):
            if not cancelled and cancel_token is not None and cancel_token.cancelled:
                cancelled = True
                logger.warning(f"Backup cancelled, {total - index + 1} files not copied")

            if disconnected or cancelled:
                builder.add_failed(relative_path)
            else:
                outcome = self._process_entry(entry, relative_path, destination_root)
                if outcome == FAILED and not self.bridge.is_connected():
                    disconnected = True
                    logger.error(
                        f"Phone disconnected, marking the remaining {total - index} files as failed"
                    )
                self._record(builder, outcome, relative_path)

            if progress_callback is not None:
                progress_callback(index, total, relative_path)

        result = builder.build()
        contacts = self.contacts.summarize(destination_root)
        log_path = destination_root / self.log_file_name

        report = BackupReport(
            device_label=device_label,
            destination_root=destination_root,
            result=result,
            contact_record_count=contacts.record_count,
            contact_file_path=contacts.file_path,
            multiple_contact_files=contacts.multiple_files,
            cancelled=cancelled,
            log_path=log_path,
        )

        try:
            self.report_writer.write(report, log_path)
        except OSError as e:
            raise DestinationError(f"Could not write backup log {log_path}: {e}") from e

        logger.info(
            f"Backup finished: {len(result.copied)} copied, "
            f"{len(result.skipped)} skipped, {len(result.failed)} failed "
            f"in {format_duration(time.monotonic() - started)}"
        )
        return report

    def _check_destination(self, destination_root: Path) -> None:
        try:
            destination_root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DestinationError(f"Cannot create backup folder {destination_root}: {e}") from e
        if not is_writable_directory(destination_root):
            raise DestinationError(f"Backup folder is not writable: {destination_root}")

    def _process_entry(self, entry: RemoteFileEntry, relative_path: str, destination_root: Path) -> str:
        local_path = self.scanner.local_path(destination_root, relative_path)

        if self._is_up_to_date(local_path, entry.size):
            logger.debug(f"Up to date: {relative_path}")
            return SKIPPED

        try:
            local_path.parent.mkdir(parents=True, exist_ok=True)
            fetched = self.bridge.fetch(entry.remote_path, local_path, expected_size=entry.size)
        except DeviceDisconnectedError as e:
            logger.debug(f"Lost the device while pulling {relative_path}: {e}")
            return FAILED
        except (ADBError, OSError, ValueError) as e:
            logger.warning(f"Failed to copy {relative_path}: {e}")
            return FAILED

        if not fetched:
            logger.warning(f"Failed to copy {relative_path}")
            return FAILED

        logger.debug(f"Copied: {relative_path}")
        return COPIED

    @staticmethod
    def _is_up_to_date(local_path: Path, size: int) -> bool:
        try:
            return local_path.is_file() and local_path.stat().st_size == size
        except OSError:
            return False

    @staticmethod
    def _record(builder: SyncResultBuilder, outcome: str, relative_path: str) -> None:
        if outcome == COPIED:
            builder.add_copied(relative_path)
        elif outcome == SKIPPED:
            builder.add_skipped(relative_path)
        else:
            builder.add_failed(relative_path)
