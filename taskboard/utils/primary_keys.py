"""Utilities for ensuring opaque string primary keys are populated."""
from __future__ import annotations

import uuid
from typing import Type

from sqlalchemy import event
from sqlalchemy.orm import Mapper


def new_id() -> str:
    """Return a fresh opaque identifier."""
    return uuid.uuid4().hex


def register_string_pk_listener(model: Type[object], pk_name: str = "id") -> None:
    """Ensure ``model`` receives an opaque string primary key before insert.

    Order arrays store the ids of boards, columns and tasks, so every entity
    must have its identity before the row that references it is written. The
    listener only assigns a value when the caller has not already done so,
    which lets services pre-allocate an id with :func:`new_id` and append it to
    an order array in the same flush.
    """

    table = getattr(model, "__table__", None)
    if table is None or pk_name not in table.c:
        raise ValueError(f"Model {model!r} does not expose a '{pk_name}' column")

    @event.listens_for(model, "before_insert", propagate=True)
    def _assign_string_pk(_: Mapper, connection, target) -> None:  # pragma: no cover - SQLAlchemy callback
        if getattr(target, pk_name) is not None:
            return
        setattr(target, pk_name, new_id())
