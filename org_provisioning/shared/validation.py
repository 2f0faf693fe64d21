"""Input validation for organization fields. All boundary inputs must pass through here."""

from __future__ import annotations

import re
import unicodedata

from org_provisioning.shared.exceptions import InvalidArgumentError

KEY_MIN_LENGTH = 1
KEY_MAX_LENGTH = 255
NAME_MIN_LENGTH = 1
NAME_MAX_LENGTH = 255
DESCRIPTION_MAX_LENGTH = 256
URL_MAX_LENGTH = 256

_INVALID_KEY_CHARS = re.compile(r"[^a-zA-Z0-9_\-]")
_HYPHEN_RUNS = re.compile(r"-{2,}")


class ValidationError(InvalidArgumentError):
    """Raised when input validation fails."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.message = message
        super().__init__(message)


def slugify(value: str) -> str:
    """Lower-case ASCII slug: accents dropped, other chars replaced by hyphens."""
    normalized = unicodedata.normalize("NFKD", value)
    ascii_only = normalized.encode("ascii", "ignore").decode("ascii")
    hyphenated = _INVALID_KEY_CHARS.sub("-", ascii_only)
    collapsed = _HYPHEN_RUNS.sub("-", hyphenated)
    return collapsed.strip("-").lower()


def check_key(key: str) -> str:
    if key is None or len(key) < KEY_MIN_LENGTH:
        raise ValidationError("key", "Key must not be empty")
    if len(key) > KEY_MAX_LENGTH:
        raise ValidationError("key", f"Key '{key}' must be at most {KEY_MAX_LENGTH} chars long")
    if slugify(key) != key:
        raise ValidationError("key", f"Key '{key}' contains at least one invalid char")
    return key


def check_name(name: str) -> str:
    if name is None or len(name) < NAME_MIN_LENGTH:
        raise ValidationError("name", "Name must not be empty")
    if len(name) > NAME_MAX_LENGTH:
        raise ValidationError("name", f"Name '{name}' must be at most {NAME_MAX_LENGTH} chars long")
    return name


def _check_max_length(value: str | None, field: str, label: str, max_length: int) -> str | None:
    if value is not None and len(value) > max_length:
        raise ValidationError(field, f"{label} '{value}' must be at most {max_length} chars long")
    return value


def check_description(description: str | None) -> str | None:
    return _check_max_length(description, "description", "Description", DESCRIPTION_MAX_LENGTH)


def check_url(url: str | None) -> str | None:
    return _check_max_length(url, "url", "Url", URL_MAX_LENGTH)


def check_avatar(avatar: str | None) -> str | None:
    return _check_max_length(avatar, "avatar", "Avatar", URL_MAX_LENGTH)


def generate_key_from(source: str) -> str:
    """Derive a valid organization key from free text (a login, a name)."""
    if not source:
        raise ValidationError("key", "Can't generate a key from an empty string")
    key = slugify(source[:KEY_MAX_LENGTH])
    if not key:
        raise ValidationError("key", f"Can't generate a key from '{source}'")
    return key


class OrganizationValidation:
    """Checks used by the organization workflow, bundled so they can be substituted."""

    def check_key(self, key: str) -> str:
        return check_key(key)

    def check_name(self, name: str) -> str:
        return check_name(name)

    def check_description(self, description: str | None) -> str | None:
        return check_description(description)

    def check_url(self, url: str | None) -> str | None:
        return check_url(url)

    def check_avatar(self, avatar: str | None) -> str | None:
        return check_avatar(avatar)

    def generate_key_from(self, source: str) -> str:
        return generate_key_from(source)
