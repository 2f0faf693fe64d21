"""JSON encoding of the dataclass rows kept in a Database.

Each row is written as its asdict() form; datetimes become ISO strings and
enums their values.
"""

from __future__ import annotations

import json
from dataclasses import asdict, fields, is_dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Callable, get_args, get_type_hints

from org_provisioning.shared.exceptions import StoreReadError, StoreWriteError

Deserializer = Callable[[dict[str, Any]], Any]


def _default(o: Any) -> Any:
    if isinstance(o, datetime):
        return o.isoformat()
    if isinstance(o, Enum):
        return o.value
    raise TypeError(f"Object of type {type(o)} is not JSON serializable")


def to_dict(obj: Any) -> dict[str, Any]:
    """JSON-safe dict of a dataclass instance."""
    if not is_dataclass(obj):
        raise TypeError(f"{type(obj).__name__} is not a dataclass")
    return json.loads(json.dumps(asdict(obj), default=_default))


def _datetime_fields(model_class: type) -> set[str]:
    hints = get_type_hints(model_class)
    return {
        f.name
        for f in fields(model_class)
        if datetime in (hints[f.name], *get_args(hints[f.name]))
    }


def default_deserializer(model_class: type) -> Deserializer:
    """Pass dict as kwargs to the model constructor, reviving the datetime fields."""
    field_names = {f.name for f in fields(model_class)}
    datetime_fields = _datetime_fields(model_class)

    def deserialize(data: dict[str, Any]) -> Any:
        filtered = {k: v for k, v in data.items() if k in field_names}
        for k in datetime_fields:
            if isinstance(filtered.get(k), str):
                filtered[k] = datetime.fromisoformat(filtered[k].replace("Z", "+00:00"))
        return model_class(**filtered)

    return deserialize


def dump_tables(tables: dict[str, dict[str, Any]], path: str | Path) -> None:
    payload = {
        name: {key: to_dict(row) for key, row in rows.items()}
        for name, rows in tables.items()
    }
    try:
        Path(path).write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
    except OSError as e:
        raise StoreWriteError(f"cannot write state file {path}: {e}") from e


def load_tables(
    path: str | Path, deserializers: dict[str, Deserializer]
) -> dict[str, dict[str, Any]]:
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise StoreReadError(f"cannot read state file {path}: {e}") from e
    tables: dict[str, dict[str, Any]] = {}
    for name, rows in raw.items():
        deserialize = deserializers.get(name)
        if deserialize is None:
            raise StoreReadError(f"unknown table '{name}' in state file {path}")
        try:
            tables[name] = {key: deserialize(row) for key, row in rows.items()}
        except (TypeError, ValueError) as e:
            raise StoreReadError(f"bad row in table '{name}' of state file {path}: {e}") from e
    return tables
