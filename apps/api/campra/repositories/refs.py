"""Entity references for pack functions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from sqlalchemy.orm import Session

from campra.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


@dataclass(frozen=True)
class ById:
    """Reference to a row that still has to be loaded."""

    id: str


@dataclass(frozen=True)
class Loaded(Generic[ModelT]):
    """Reference to an entity the caller already holds."""

    entity: ModelT


Ref = Union[ById, Loaded]


class EntityNotFound(LookupError):
    def __init__(self, model: type[Base], entity_id: str):
        self.model = model
        self.entity_id = entity_id
        super().__init__(f"{model.__name__} {entity_id} not found")


def resolve_optional(db: Session, model: type[ModelT], ref: Ref) -> ModelT | None:
    if isinstance(ref, Loaded):
        return ref.entity
    if isinstance(ref, ById):
        return db.get(model, ref.id)
    raise TypeError(f"Expected ById or Loaded, got {type(ref).__name__}")


def resolve(db: Session, model: type[ModelT], ref: Ref) -> ModelT:
    """Return the referenced entity, raising EntityNotFound if it is missing."""
    entity = resolve_optional(db, model, ref)
    if entity is None:
        raise EntityNotFound(model, ref.id)
    return entity
