"""Tenant row-visibility filter.

A row of a scopable entity is visible when it belongs to the current tenant or
to no tenant at all (a global row). When no tenant is selected for the unit of
work, nothing is filtered: system jobs and administrative paths see every row.

Three ways to use it:

- Automatic: ``TenantScope.install(session_factory)`` narrows every ORM
  statement executed by sessions from that factory, using the context bound
  with ``bind_tenant_context``.
- Bypass once: ``without_tenant_scope(stmt)`` marks one statement as exempt.
- Apply once: ``TenantVisibilityFilter().apply(stmt, entity_type, ctx)``
  narrows one statement with no session machinery involved.
"""

import logging
from collections.abc import Iterable
from typing import Any, TypeVar

from sqlalchemy import ColumnElement, event, or_
from sqlalchemy.orm import (
    DeclarativeBase,
    ORMExecuteState,
    Session,
    UOWTransaction,
    sessionmaker,
    with_loader_criteria,
)

from backend.app.db.context import TenantContext, get_bound_context
from backend.app.db.schema import ScopableEntityType, scopable_entities
from backend.app.utils.metrics import PrometheusScopeMetrics, scope_metrics

logger = logging.getLogger(__name__)

SKIP_TENANT_SCOPE = "skip_tenant_scope"
TENANT_SCOPE_APPLIED = "tenant_scope_applied"

# Select, Query, Update and Delete all expose where() and execution_options().
StatementT = TypeVar("StatementT", bound=Any)


def is_visible(row_tenant_id: int | None, ctx: TenantContext) -> bool:
    """Visibility rule evaluated in Python, for rows already in memory."""
    if not ctx.has_tenant:
        return True
    return row_tenant_id is None or row_tenant_id == ctx.current_tenant_id


def visibility_predicate(entity_type: ScopableEntityType, tenant_id: int) -> ColumnElement[bool]:
    """Build ``(tenant = :id OR tenant IS NULL)`` as a self-contained group."""
    column = entity_type.column()
    return or_(column == tenant_id, column.is_(None)).self_group()


def without_tenant_scope(statement: StatementT) -> StatementT:
    """Exempt one statement from automatic tenant scoping."""
    return statement.execution_options(**{SKIP_TENANT_SCOPE: True})


class TenantVisibilityFilter:
    """Narrows a single statement to rows visible under a tenant context."""

    def __init__(self, metrics: PrometheusScopeMetrics = scope_metrics) -> None:
        self._metrics = metrics

    def apply(
        self, query: StatementT, entity_type: ScopableEntityType, context: TenantContext
    ) -> StatementT:
        """Conjoin the visibility predicate onto ``query``.

        The query is returned unchanged when the entity has no tenant column
        or when no tenant is selected. Existing predicates are kept; the
        visibility group is ANDed onto them. Applying twice for the same
        entity and tenant adds the clause only once.

        Args:
            query: Select (or legacy Query) targeting ``entity_type.entity``
            entity_type: Schema facts for the queried entity
            context: Tenant context of the current unit of work

        Returns:
            The narrowed statement
        """
        if not entity_type.has_tenant_column:
            return query
        if not context.has_tenant:
            return query

        tenant_id = context.current_tenant_id
        assert tenant_id is not None
        marker = (entity_type.name, tenant_id)
        applied: frozenset[tuple[str, int]] = query.get_execution_options().get(
            TENANT_SCOPE_APPLIED, frozenset()
        )
        if marker in applied:
            return query

        logger.debug("Applying tenant scope to %s for tenant %s", entity_type.name, tenant_id)
        self._metrics.inc_applied(entity_type.name, "explicit")
        return query.where(visibility_predicate(entity_type, tenant_id)).execution_options(
            **{TENANT_SCOPE_APPLIED: applied | {marker}}
        )


class TenantScope:
    """Automatic tenant scoping for a set of scopable entities.

    Installs ORM event hooks on a Session class or sessionmaker:
    ``do_orm_execute`` adds loader criteria to every SELECT, UPDATE and DELETE,
    and ``before_flush`` stamps the bound tenant onto new rows that have none.
    """

    def __init__(
        self,
        entity_types: Iterable[ScopableEntityType],
        *,
        stamp_on_insert: bool = True,
        metrics: PrometheusScopeMetrics = scope_metrics,
    ) -> None:
        self._entity_types = {e.entity: e for e in entity_types if e.has_tenant_column}
        self._stamp_on_insert = stamp_on_insert
        self._metrics = metrics

    @classmethod
    def for_base(
        cls, base: type[DeclarativeBase], tenant_column: str, **kwargs: Any
    ) -> "TenantScope":
        """Scope every entity under ``base`` whose table has ``tenant_column``."""
        return cls(scopable_entities(base, tenant_column), **kwargs)

    @property
    def entity_types(self) -> list[ScopableEntityType]:
        return list(self._entity_types.values())

    def install(self, target: type[Session] | sessionmaker[Any]) -> None:
        """Register the scoping hooks on ``target``. Safe to call twice."""
        if not event.contains(target, "do_orm_execute", self._scope_execution):
            event.listen(target, "do_orm_execute", self._scope_execution)
        if self._stamp_on_insert and not event.contains(
            target, "before_flush", self._stamp_new_rows
        ):
            event.listen(target, "before_flush", self._stamp_new_rows)

        logger.info(
            "Tenant scope installed",
            extra={
                "structured": {
                    "entities": sorted(e.name for e in self._entity_types.values()),
                    "stamp_on_insert": self._stamp_on_insert,
                }
            },
        )

    def uninstall(self, target: type[Session] | sessionmaker[Any]) -> None:
        """Remove hooks previously registered by ``install``."""
        if event.contains(target, "do_orm_execute", self._scope_execution):
            event.remove(target, "do_orm_execute", self._scope_execution)
        if event.contains(target, "before_flush", self._stamp_new_rows):
            event.remove(target, "before_flush", self._stamp_new_rows)

    def _scoped_in(self, state: ORMExecuteState) -> list[ScopableEntityType]:
        return [
            self._entity_types[mapper.class_]
            for mapper in state.all_mappers
            if mapper.class_ in self._entity_types
        ]

    def _entity_type_of(self, obj: object) -> ScopableEntityType | None:
        # Subclasses of a scopable entity share its tenant column.
        for cls in type(obj).__mro__:
            entity_type = self._entity_types.get(cls)
            if entity_type is not None:
                return entity_type
        return None

    def _scope_execution(self, state: ORMExecuteState) -> None:
        if not (state.is_select or state.is_update or state.is_delete):
            return
        # Refreshes reload rows already admitted to the session.
        if state.is_column_load:
            return

        # A bypass covers its own statement only, never the relationship loads it leads to.
        bypassed = state.execution_options.get(SKIP_TENANT_SCOPE, False)
        if bypassed and not state.is_relationship_load:
            for entity_type in self._scoped_in(state):
                self._metrics.inc_bypassed(entity_type.name)
            return

        ctx = get_bound_context(state.session)
        if not ctx.has_tenant:
            return
        tenant_id = ctx.current_tenant_id
        assert tenant_id is not None

        for entity_type in self._scoped_in(state):
            self._metrics.inc_applied(entity_type.name, "auto")

        state.statement = state.statement.options(
            *(
                with_loader_criteria(
                    entity_type.entity,
                    visibility_predicate(entity_type, tenant_id),
                    include_aliases=True,
                )
                for entity_type in self._entity_types.values()
            )
        )

    def _stamp_new_rows(
        self, session: Session, flush_context: UOWTransaction, instances: object
    ) -> None:
        ctx = get_bound_context(session)
        if not ctx.has_tenant:
            return

        for obj in session.new:
            entity_type = self._entity_type_of(obj)
            if entity_type is None:
                continue
            if getattr(obj, entity_type.tenant_column) is None:
                setattr(obj, entity_type.tenant_column, ctx.current_tenant_id)
                logger.debug(
                    "Stamped new %s with tenant %s", entity_type.name, ctx.current_tenant_id
                )
