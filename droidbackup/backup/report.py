"""Plain-text backup log written at the end of every run."""

from pathlib import Path
from typing import Iterable, List

from .models import BackupReport
from ..util.logging import get_logger
from ..util.timeutil import format_report_date

logger = get_logger(__name__)

RULE = "=" * 53
THIN_RULE = "-" * 53
MULTIPLE_CONTACTS_NOTE = "Note: Multiple contact files were found. Count is from the first file."


class ReportWriter:
    """Renders a :class:`BackupReport` and persists it, overwriting any older log."""

    def render(self, report: BackupReport) -> str:
        result = report.result
        lines: List[str] = [
            RULE,
            "               Android Backup Log",
            RULE,
            f"Date:           {format_report_date(report.created_at)}",
            f"Phone Model:    {report.device_label}",
            f"Backup Location: {report.destination_root}",
        ]
        if report.cancelled:
            lines.append("Status:         Cancelled before completion")
        lines += [
            THIN_RULE,
            "",
            "--- Summary ---",
            f"Successfully Copied: {len(result.copied)} files",
            f"Skipped (Up to Date): {len(result.skipped)} files",
            f"Failed to Copy:      {len(result.failed)} files",
            "",
            "--- Contacts Summary ---",
        ]

        if report.contact_record_count > 0 and report.contact_file_path is not None:
            lines.append(
                f"Contacts Found: {report.contact_record_count} in file '{report.contact_file_path}'"
            )
        else:
            lines.append("Contacts Found: 0")
        if report.multiple_contact_files:
            lines.append(MULTIPLE_CONTACTS_NOTE)
        lines.append("")

        lines += self._section(f"--- Successfully Copied Files ({len(result.copied)}) ---", result.copied)
        if result.skipped:
            lines += self._section(
                f"--- Skipped Files (Already Up to Date) ({len(result.skipped)}) ---", result.skipped
            )
        if result.has_failures:
            lines += self._section(f"--- FAILED TO COPY ({len(result.failed)}) ---", result.failed)

        return "\n".join(lines) + "\n"

    def _section(self, title: str, paths: Iterable[str]) -> List[str]:
        return [RULE, title, RULE, *paths, ""]

    def write(self, report: BackupReport, log_path: Path) -> Path:
        """Write the log file and return its path."""
        log_path.parent.mkdir(parents=True, exist_ok=True)
        with open(log_path, "w", encoding="utf-8", errors="surrogateescape") as f:
            f.write(self.render(report))

        logger.info(f"Backup log written to {log_path}")
        return log_path
