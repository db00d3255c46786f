"""Backup module initialization."""

from .engine import ProgressCallback, SyncEngine
from .models import BackupReport, RemoteFileEntry, SyncResult, SyncResultBuilder
from .report import ReportWriter
from .scanner import DeviceScanner, ScanResult
from .storage import BackupStorage, DestinationError

__all__ = [
    # engine
    "ProgressCallback",
    "SyncEngine",
    # models
    "BackupReport",
    "RemoteFileEntry",
    "SyncResult",
    "SyncResultBuilder",
    # report
    "ReportWriter",
    # scanner
    "DeviceScanner",
    "ScanResult",
    # storage
    "BackupStorage",
    "DestinationError",
]
