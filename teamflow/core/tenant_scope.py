"""
Tenant isolation at the ORM level.

Models that hold organization data inherit ``TenantScoped``. Every ORM
SELECT whose primary entity is tenant scoped must constrain
``organization_id`` in its WHERE clause; otherwise the query is rejected
with ``TenantScopeError`` before it reaches the database.

Queries that are legitimately scoped by something else (for example "the
organizations this user belongs to") opt out explicitly with
``.execution_options(cross_tenant=True)``.
"""
from sqlalchemy import Column, ForeignKey, String, event
from sqlalchemy.orm import Session, declared_attr
from sqlalchemy.sql import visitors

from teamflow.core.exceptions import TenantScopeError
from teamflow.core.logging_config import logger

CROSS_TENANT_OPTION = "cross_tenant"


class TenantScoped:
    """Marker mixin for entities that belong to exactly one organization."""

    @declared_attr
    def organization_id(cls):
        return Column(
            String(36),
            ForeignKey("organization.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )


def filters_on_organization(statement, table) -> bool:
    """Return True if the statement's WHERE clause references table.organization_id."""
    whereclause = getattr(statement, "whereclause", None)
    if whereclause is None:
        return False
    for element in visitors.iterate(whereclause):
        if getattr(element, "table", None) is table and getattr(element, "key", None) == "organization_id":
            return True
    return False


@event.listens_for(Session, "do_orm_execute")
def _enforce_tenant_scope(orm_execute_state):
    if not orm_execute_state.is_select:
        return
    # Lazy loads and refreshes start from an already scoped object
    if orm_execute_state.is_column_load or orm_execute_state.is_relationship_load:
        return
    if orm_execute_state.execution_options.get(CROSS_TENANT_OPTION, False):
        return

    for mapper in orm_execute_state.all_mappers:
        model = mapper.class_
        if issubclass(model, TenantScoped) and not filters_on_organization(
            orm_execute_state.statement, mapper.local_table
        ):
            logger.error(f"Rejected query on {model.__name__} without organization_id filter")
            raise TenantScopeError(model.__name__)
