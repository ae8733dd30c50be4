"""
Access decisions and the context predicates are evaluated against.

A predicate returns one of:

- ``Allow``: unconditional access.
- ``Deny``: no access. Also the answer for an absent caller.
- ``AllowWithFilter``: access restricted to documents matching any of its
  conditions (OR). Applied to SQLAlchemy ``select`` statements for list
  queries, or checked against a single document with ``permits``.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Union
from uuid import UUID

from sqlalchemy import Select, false, or_
from sqlalchemy.ext.asyncio import AsyncSession

from eventdesk.models.user import User


@dataclass(frozen=True)
class AccessContext:
    """Explicit inputs for a predicate: the data handle and the caller."""

    db: AsyncSession
    user: User | None
    data: Mapping[str, Any] | None = None
    doc_id: UUID | None = None


@dataclass(frozen=True)
class Allow:
    def __bool__(self) -> bool:
        return True

    def apply(self, stmt: Select, model: type) -> Select:
        return stmt

    def permits(self, document: Mapping[str, Any]) -> bool:
        return True


@dataclass(frozen=True)
class Deny:
    def __bool__(self) -> bool:
        return False

    def apply(self, stmt: Select, model: type) -> Select:
        return stmt.where(false())

    def permits(self, document: Mapping[str, Any]) -> bool:
        return False


@dataclass(frozen=True)
class FieldIn:
    """``field`` must be one of ``values``."""

    field: str
    values: tuple[Any, ...]

    def clause(self, model: type) -> Any:
        return getattr(model, self.field).in_(self.values)

    def matches(self, document: Mapping[str, Any]) -> bool:
        return _normalize(document.get(self.field)) in {_normalize(v) for v in self.values}


@dataclass(frozen=True)
class FieldEquals:
    field: str
    value: Any

    def clause(self, model: type) -> Any:
        return getattr(model, self.field) == self.value

    def matches(self, document: Mapping[str, Any]) -> bool:
        return _normalize(document.get(self.field)) == _normalize(self.value)


Condition = Union[FieldIn, FieldEquals]


@dataclass(frozen=True)
class AllowWithFilter:
    conditions: tuple[Condition, ...] = field(default_factory=tuple)

    @classmethod
    def field_in(cls, field_name: str, values: Iterable[Any]) -> AllowWithFilter:
        return cls((FieldIn(field_name, tuple(values)),))

    def __bool__(self) -> bool:
        return True

    def apply(self, stmt: Select, model: type) -> Select:
        if not self.conditions:
            return stmt.where(false())
        return stmt.where(or_(*(c.clause(model) for c in self.conditions)))

    def permits(self, document: Mapping[str, Any]) -> bool:
        return any(c.matches(document) for c in self.conditions)


Decision = Union[Allow, Deny, AllowWithFilter]
Predicate = Callable[[AccessContext], Awaitable[Decision]]

ALLOW = Allow()
DENY = Deny()


def _normalize(value: Any) -> Any:
    if isinstance(value, UUID):
        return str(value)
    if hasattr(value, "value") and isinstance(getattr(value, "value"), str):
        return value.value
    return value if value is None else str(value)
