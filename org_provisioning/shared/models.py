"""Core data models for organization provisioning."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


def _parse_datetime(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


# --- Enums ---

class Subscription(str, Enum):
    FREE = "FREE"
    PAID = "PAID"
    SONARQUBE = "SONARQUBE"


class Visibility(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"


# --- Organization ---

@dataclass
class Organization:
    key: str
    name: str
    uuid: str = field(default_factory=_new_id)
    description: str | None = None
    url: str | None = None
    avatar_url: str | None = None
    subscription: Subscription = Subscription.FREE
    new_project_private: bool = False
    default_group_uuid: str | None = None
    default_quality_gate_uuid: str | None = None
    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime = field(default_factory=_utc_now)

    @property
    def visibility(self) -> Visibility:
        return Visibility.PRIVATE if self.new_project_private else Visibility.PUBLIC

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Organization:
        data = dict(data)
        data["subscription"] = Subscription(data.get("subscription", Subscription.FREE))
        data["created_at"] = _parse_datetime(data["created_at"])
        data["updated_at"] = _parse_datetime(data["updated_at"])
        return cls(**data)


@dataclass
class DefaultTemplates:
    organization_uuid: str
    project_uuid: str
    applications_uuid: str | None = None


@dataclass(frozen=True)
class NewOrganization:
    """Descriptor of an organization to create. Only name and key are required."""

    name: str
    key: str
    description: str | None = None
    url: str | None = None
    avatar: str | None = None

    @staticmethod
    def builder() -> NewOrganizationBuilder:
        return NewOrganizationBuilder()


class NewOrganizationBuilder:
    def __init__(self) -> None:
        self._values: dict[str, str | None] = {}

    def set_name(self, name: str) -> NewOrganizationBuilder:
        self._values["name"] = name
        return self

    def set_key(self, key: str) -> NewOrganizationBuilder:
        self._values["key"] = key
        return self

    def set_description(self, description: str | None) -> NewOrganizationBuilder:
        self._values["description"] = description
        return self

    def set_url(self, url: str | None) -> NewOrganizationBuilder:
        self._values["url"] = url
        return self

    def set_avatar(self, avatar: str | None) -> NewOrganizationBuilder:
        self._values["avatar"] = avatar
        return self

    def build(self) -> NewOrganization:
        for required in ("name", "key"):
            if self._values.get(required) is None:
                raise ValueError(f"{required} can't be None")
        return NewOrganization(**self._values)


# --- Users ---

@dataclass
class User:
    login: str
    name: str = ""
    uuid: str = field(default_factory=_new_id)
    email: str | None = None
    active: bool = True
    created_at: datetime = field(default_factory=_utc_now)


@dataclass
class OrganizationMember:
    organization_uuid: str
    user_uuid: str


# --- Groups and permissions ---

@dataclass
class Group:
    organization_uuid: str
    name: str
    description: str = ""
    uuid: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime = field(default_factory=_utc_now)


@dataclass
class GroupPermission:
    organization_uuid: str
    group_uuid: str
    permission: str
    uuid: str = field(default_factory=_new_id)


@dataclass
class GroupMembership:
    group_uuid: str
    user_uuid: str


@dataclass
class PermissionTemplate:
    organization_uuid: str
    name: str
    description: str = ""
    uuid: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime = field(default_factory=_utc_now)


@dataclass
class TemplateGroupPermission:
    template_uuid: str
    group_uuid: str
    permission: str
    uuid: str = field(default_factory=_new_id)


# --- Quality profiles and gates ---

@dataclass
class RulesProfile:
    language: str
    name: str
    built_in: bool = False
    uuid: str = field(default_factory=_new_id)


@dataclass
class QualityProfile:
    organization_uuid: str
    rules_profile_uuid: str
    language: str
    name: str
    uuid: str = field(default_factory=_new_id)
    parent_uuid: str | None = None
    last_used: datetime | None = None
    user_updated_at: datetime | None = None


@dataclass
class DefaultQualityProfile:
    organization_uuid: str
    language: str
    quality_profile_uuid: str


@dataclass
class QualityGate:
    name: str
    built_in: bool = False
    uuid: str = field(default_factory=_new_id)


@dataclass
class OrgQualityGate:
    organization_uuid: str
    quality_gate_uuid: str
    uuid: str = field(default_factory=_new_id)
