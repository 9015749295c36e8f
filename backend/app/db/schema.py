"""Schema facts about tenant-scopable entities."""

from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from sqlalchemy import inspect
from sqlalchemy.orm import DeclarativeBase, InstrumentedAttribute


@dataclass(frozen=True)
class ScopableEntityType:
    """Whether a mapped entity carries the tenant attribute.

    Attributes:
        entity: Mapped class
        tenant_column: Attribute name checked for, e.g. "environment_id"
        has_tenant_column: True when the entity's table declares that column
    """

    entity: type
    tenant_column: str
    has_tenant_column: bool

    @property
    def name(self) -> str:
        return self.entity.__name__

    def column(self) -> InstrumentedAttribute[Any]:
        """Return the tenant column expression for this entity.

        Raises:
            AttributeError: If the entity has no tenant column
        """
        if not self.has_tenant_column:
            raise AttributeError(f"{self.name} has no {self.tenant_column!r} column")
        return getattr(self.entity, self.tenant_column)


@lru_cache(maxsize=None)
def describe_entity(entity: type, tenant_column: str) -> ScopableEntityType:
    """Introspect a mapped class for the tenant column.

    Results are cached per (entity, column) for the life of the process since
    the mapped schema does not change while running.

    Raises:
        sqlalchemy.exc.NoInspectionAvailable: If entity is not mapped
    """
    mapper = inspect(entity)
    return ScopableEntityType(
        entity=entity,
        tenant_column=tenant_column,
        has_tenant_column=tenant_column in mapper.columns,
    )


def scopable_entities(base: type[DeclarativeBase], tenant_column: str) -> list[ScopableEntityType]:
    """List every mapped class under a declarative base that carries the tenant column."""
    found: list[ScopableEntityType] = []
    for mapper in base.registry.mappers:
        entity_type = describe_entity(mapper.class_, tenant_column)
        if entity_type.has_tenant_column:
            found.append(entity_type)
    return sorted(found, key=lambda e: e.name)
