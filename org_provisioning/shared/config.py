"""Runtime settings, read from the environment with explicit overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Any, Mapping

from org_provisioning.shared.exceptions import ConfigurationError

_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off"}

_ENV_VARS = {
    "default_public_visibility": "ORG_DEFAULT_PUBLIC_VISIBILITY",
    "log_level": "LOG_LEVEL",
    "state_file": "ORGCTL_STATE",
}


def parse_bool(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name}: expected a boolean, got {value!r}")


@dataclass
class Settings:
    """Global configuration provider.

    default_public_visibility decides whether projects of newly created
    organizations are public. It is on unless configured otherwise.
    """

    default_public_visibility: bool = True
    log_level: str = "INFO"
    state_file: str = "orgctl-state.json"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        settings = cls()
        for name, var in _ENV_VARS.items():
            if var in env:
                settings.set_property(name, env[var])
        return settings

    def set_property(self, name: str, value: Any) -> None:
        known = {f.name for f in fields(self)}
        if name not in known:
            raise ConfigurationError(f"unknown setting '{name}'")
        if name == "default_public_visibility":
            value = parse_bool(value, name)
        elif name == "log_level":
            value = str(value).upper()
        setattr(self, name, value)
