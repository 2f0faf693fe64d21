"""Custom exception hierarchy for organization provisioning.

All provisioning exceptions inherit from OrgProvisioningError, allowing
callers to catch broad or specific failure modes. Nothing here is retried
automatically: the enclosing session rolls back and the error reaches the caller.
"""

from __future__ import annotations


class OrgProvisioningError(Exception):
    """Base exception for all organization provisioning errors."""


# --- Argument errors ---


class InvalidArgumentError(OrgProvisioningError, ValueError):
    """Malformed field or missing descriptor."""


# --- Conflict errors ---


class KeyConflictError(OrgProvisioningError):
    """Organization key already in use at creation time."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Organization key '{key}' is already used")


class StateConflictError(OrgProvisioningError, RuntimeError):
    """Operation conflicts with the current persisted state."""


# --- Identity / Lookup errors ---


class NotFoundError(OrgProvisioningError):
    """Requested resource does not exist."""


class OrganizationNotFoundError(NotFoundError):
    """Organization not found."""


# --- Store errors ---


class StoreError(OrgProvisioningError):
    """Base for persistence layer failures."""


class StoreWriteError(StoreError):
    """Failed to write to store."""


class UniqueConstraintError(StoreWriteError):
    """Insert would violate a uniqueness constraint."""

    def __init__(self, table: str, column: str, value: str) -> None:
        self.table = table
        self.column = column
        self.value = value
        super().__init__(f"{table}.{column} '{value}' already exists")


class StoreReadError(StoreError):
    """Failed to read from store."""


class ConfigurationError(OrgProvisioningError):
    """Invalid or missing configuration."""
