"""Contact-export discovery and counting."""

import os
from pathlib import Path
from typing import List, NamedTuple, Optional

from ..util.logging import get_logger

logger = get_logger(__name__)

VCARD_START = "BEGIN:VCARD"


class ContactsSummary(NamedTuple):
    """Contacts found in a backup folder."""

    record_count: int
    file_path: Optional[Path]
    files_found: int

    @property
    def multiple_files(self) -> bool:
        return self.files_found > 1


class ContactsCounter:
    """Finds contact-export files in a backup and counts their records.

    Only the first file found is counted. "First" is the order the
    filesystem hands back entries in, not alphabetical or by date; when
    several files exist the summary says so instead of picking one
    deliberately.
    """

    def __init__(self, extension: str = ".vcf", record_marker: str = VCARD_START):
        self.extension = extension.lower()
        self.record_marker = record_marker

    def find_contact_files(self, root: Path) -> List[Path]:
        """All contact-export files under ``root`` in filesystem enumeration order."""
        found = []
        for dirpath, _dirnames, filenames in os.walk(root):
            for filename in filenames:
                if filename.lower().endswith(self.extension):
                    path = Path(dirpath) / filename
                    if path.is_file():
                        found.append(path)
        return found

    def count_records(self, path: Path) -> int:
        """Number of lines starting with the record marker; 0 if unreadable."""
        try:
            with open(path, "r", encoding="utf-8", errors="replace") as f:
                return sum(1 for line in f if line.startswith(self.record_marker))
        except OSError as e:
            logger.warning(f"Could not read contact file {path}: {e}")
            return 0

    def summarize(self, root: Path) -> ContactsSummary:
        files = self.find_contact_files(root)
        if not files:
            return ContactsSummary(record_count=0, file_path=None, files_found=0)

        first = files[0]
        count = self.count_records(first)
        if len(files) > 1:
            logger.warning(f"Found {len(files)} contact files, counting only {first}")
        else:
            logger.info(f"Counted {count} contacts in {first}")

        return ContactsSummary(record_count=count, file_path=first, files_found=len(files))
