"""Contacts package."""

from swish_client.contacts.directory import ContactDirectory, initials_for, to_contact

__all__ = ["ContactDirectory", "initials_for", "to_contact"]
