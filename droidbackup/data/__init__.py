"""Data export module initialization."""

from .contacts import VCARD_START, ContactsCounter, ContactsSummary

__all__ = [
    "ContactsCounter",
    "ContactsSummary",
    "VCARD_START",
]
