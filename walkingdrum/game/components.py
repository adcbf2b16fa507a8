"""Typed components and their JSON encoding for components.state."""

from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass
from typing import Any, ClassVar, Type, TypeVar, Union

from walkingdrum.game.model import Component

COMPONENT_HIDDEN = "hidden"

C = TypeVar("C")


class ComponentError(ValueError):
    """A component could not be encoded or decoded."""


@dataclass(frozen=True)
class Hidden:
    """Marker component: an entity carrying it is not broadcast to clients."""

    component_type: ClassVar[str] = COMPONENT_HIDDEN


def _type_name(obj: Any) -> str:
    return getattr(obj, "component_type", None) or type(obj).__name__


def encode_component(component: Component) -> bytes:
    """Serialise a dataclass component to the JSON stored in components.state."""
    if not dataclasses.is_dataclass(component) or isinstance(component, type):
        raise ComponentError(f"encode component {_type_name(component)}: not a dataclass instance")
    try:
        text = json.dumps(dataclasses.asdict(component), separators=(",", ":"))
    except (TypeError, ValueError) as err:
        raise ComponentError(f"encode component {component.component_type}: {err}") from err
    return text.encode("utf-8")


def decode_component(raw: Union[bytes, str], cls: Type[C]) -> C:
    """Build an instance of the dataclass *cls* from stored JSON state.

    Keys that *cls* has no field for are ignored.
    """
    name = getattr(cls, "component_type", cls.__name__)
    if not dataclasses.is_dataclass(cls):
        raise ComponentError(f"decode component {name}: not a dataclass")
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as err:
        raise ComponentError(f"decode component {name}: {err}") from err
    if not isinstance(data, dict):
        raise ComponentError(f"decode component {name}: expected a JSON object")
    names = {f.name for f in dataclasses.fields(cls) if f.init}
    try:
        return cls(**{key: value for key, value in data.items() if key in names})
    except TypeError as err:
        raise ComponentError(f"decode component {name}: {err}") from err