"""Tri-state values for partial updates.

PATCH bodies distinguish three cases for each field: the field was
omitted (keep the stored value), the field was sent with a value, and
the field was sent as an explicit ``null`` on a nullable column. Plain
``Optional`` collapses the last two cases, so update commands carry
``Update[T]`` values instead.

Example:
    class TableUpdate(BaseSchema):
        description: str | None = None

    changes = changes_from(body)  # {"description": Change(None)} for {"description": null}
    apply_changes(table, changes)
"""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


@dataclass(frozen=True)
class Keep:
    """Leave the stored value untouched."""


@dataclass(frozen=True)
class Change(Generic[T]):
    """Replace the stored value (``None`` clears a nullable field)."""

    value: T


Update = Keep | Change[T]

KEEP = Keep()


def field_update(model: BaseModel, name: str) -> Update[Any]:
    """Tri-state value of a single field of a request model."""
    if name in model.model_fields_set:
        return Change(getattr(model, name))
    return KEEP


def changes_from(model: BaseModel) -> dict[str, Update[Any]]:
    """Tri-state value for every declared field of a request model."""
    return {name: field_update(model, name) for name in type(model).model_fields}


def apply_changes(target: Any, changes: dict[str, Update[Any]]) -> list[str]:
    """Apply ``Change`` values to attributes of ``target``.

    Returns:
        Names of the attributes that were actually modified.
    """
    changed: list[str] = []
    for name, update in changes.items():
        if isinstance(update, Change) and getattr(target, name) != update.value:
            setattr(target, name, update.value)
            changed.append(name)
    return changed
