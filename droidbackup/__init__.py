"""
DroidBackup - copy an Android phone's media and documents over ADB.

- Incremental, size-based sync of DCIM, Pictures, Download and friends
- Backup to a USB drive (mounted and ejected for you) or to the desktop
- Plain-text backup log with copied / skipped / failed files and a contacts count
"""

__version__ = "0.1.0"
__author__ = "DroidBackup Contributors"
