"""
Shared lifecycle for store-backed entities.

Every entity follows the same path: created from validated input, active,
soft deleted (``deleted_at`` set, hidden from listings and lookups), and
finally hard deleted. Writes that depend on the row's current state are
issued as single conditional statements so there is no gap between the
existence check and the write.
"""

import logging
from datetime import datetime, timezone
from typing import Any, ClassVar, Generic, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel as Schema
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from freshmarket.core.errors import NotFound, ValidationError, first_validation_message
from freshmarket.models.base import BaseModel
from freshmarket.schemas.pagination import PageParams

log = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)
SchemaT = TypeVar("SchemaT", bound=Schema)


def validate_input(schema: Type[SchemaT], data: Union[SchemaT, Mapping[str, Any]]) -> SchemaT:
    """Validate raw input against a schema, reporting the first violated field."""
    if isinstance(data, schema):
        return data
    if isinstance(data, Schema):
        data = data.model_dump(by_alias=True)
    try:
        return schema.model_validate(data)
    except PydanticValidationError as exc:
        field, message = first_validation_message(exc.errors())
        raise ValidationError(message, field=field) from exc


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EntityService(Generic[ModelT]):
    model: ClassVar[Type[BaseModel]]
    label: ClassVar[str] = "Entity"

    def __init__(self, db: Session):
        self.db = db

    # Extra WHERE clauses that scope every lookup, e.g. a user role.
    def scope(self) -> list:
        return []

    def _active(self) -> list:
        return [self.model.deleted_at.is_(None), *self.scope()]

    def not_found(self) -> NotFound:
        return NotFound(f"{self.label} not found")

    def get_all(self, params: Optional[PageParams] = None) -> list[ModelT]:
        params = params or PageParams()
        stmt = (
            select(self.model)
            .where(*self._active())
            .order_by(self.model.created_at, self.model.id)
            .offset(params.offset)
            .limit(params.limit)
        )
        rows = list(self.db.scalars(stmt))
        log.info("Fetched %d %s rows (page=%d, limit=%d)", len(rows), self.label.lower(), params.page, params.limit)
        return rows

    def count(self) -> int:
        stmt = select(func.count()).select_from(self.model).where(*self._active())
        return self.db.scalar(stmt) or 0

    def get_by_id(self, entity_id: str) -> ModelT:
        stmt = select(self.model).where(self.model.id == entity_id, *self._active())
        entity = self.db.scalars(stmt).first()
        if entity is None:
            raise self.not_found()
        return entity

    def get_including_deleted(self, entity_id: str) -> Optional[ModelT]:
        """Return the row even when soft deleted, or None; used before purging."""
        stmt = select(self.model).where(self.model.id == entity_id, *self.scope())
        return self.db.scalars(stmt).first()

    def _conditional_update(self, entity_id: str, values: dict) -> ModelT:
        stmt = (
            update(self.model)
            .where(self.model.id == entity_id, *self._active())
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        if result.rowcount == 0:
            self.db.rollback()
            raise self.not_found()
        self.db.commit()
        entity = self.db.get(self.model, entity_id, populate_existing=True)
        if entity is None:
            # removed by a concurrent hard delete after our commit
            raise self.not_found()
        return entity

    def soft_delete(self, entity_id: str) -> ModelT:
        entity = self._conditional_update(entity_id, {"deleted_at": utcnow()})
        log.info("%s soft deleted: %s", self.label, entity_id)
        return entity

    def hard_delete(self, entity_id: str) -> None:
        # soft-deleted rows are still removable, so only the scope applies here
        stmt = (
            delete(self.model)
            .where(self.model.id == entity_id, *self.scope())
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        if result.rowcount == 0:
            self.db.rollback()
            raise self.not_found()
        self.db.commit()
        self.db.expire_all()
        log.info("%s permanently deleted: %s", self.label, entity_id)

    def _insert(self, entity: ModelT) -> ModelT:
        self.db.add(entity)
        self.db.commit()
        self.db.refresh(entity)
        log.info("%s created: %s", self.label, entity.id)
        return entity
