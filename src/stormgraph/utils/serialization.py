from __future__ import annotations

from dataclasses import fields, is_dataclass
from enum import Enum
from typing import Any

import numpy as np


def camel_case(name: str) -> str:
    """
    snake_case -> camelCase, the field style of the JSON snapshot and wire.
    """
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def to_wire(value: Any) -> Any:
    """
    Converts engine results into JSON-safe structures.

    Objects exposing `to_dict` (nodes, edges) serialize themselves;
    other dataclasses are walked field by field with camelCase keys.
    """
    if hasattr(value, "to_dict") and callable(value.to_dict):
        return to_wire(value.to_dict())
    if is_dataclass(value) and not isinstance(value, type):
        return {
            camel_case(f.name): to_wire(getattr(value, f.name))
            for f in fields(value)
        }
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, dict):
        return {k: to_wire(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [to_wire(v) for v in value]
    return value
