# doc_paginate/store/gateway.py
from sqlalchemy import inspect as sa_inspect
from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.sql.elements import ColumnElement

from doc_paginate.pagination.constants import OperationVariant
from doc_paginate.pagination.service import DocumentPaginator, PaginatorConfig

from .filters import column_attribute
from .query import CountQuery, FindQuery


class _Operations:
    variant: OperationVariant

    def __init__(self, gateway: "SQLAlchemyGateway"):
        self.gateway = gateway

    def visibility(self) -> list[ColumnElement]:
        raise NotImplementedError

    def count(self, filters) -> CountQuery:
        return CountQuery(
            self.gateway.session_factory,
            self.gateway.model,
            filters,
            self.visibility,
            self.variant,
        )

    def find(self, filters) -> FindQuery:
        return FindQuery(
            self.gateway.session_factory,
            self.gateway.model,
            filters,
            self.visibility,
            self.variant,
        )


class ActiveOperations(_Operations):
    variant = OperationVariant.DEFAULT

    def visibility(self) -> list[ColumnElement]:
        deleted = self.gateway.deleted_column()
        return [or_(deleted.is_(None), deleted.is_(False))]


class DeletedOperations(_Operations):
    variant = OperationVariant.DELETED

    def visibility(self) -> list[ColumnElement]:
        return [self.gateway.deleted_column().is_(True)]


class WithDeletedOperations(_Operations):
    variant = OperationVariant.WITH_DELETED

    def visibility(self) -> list[ColumnElement]:
        return []


class SQLAlchemyGateway:
    """Count/find operations over one mapped model, scoped by a soft-delete flag."""

    _families = {
        OperationVariant.DEFAULT: ActiveOperations,
        OperationVariant.DELETED: DeletedOperations,
        OperationVariant.WITH_DELETED: WithDeletedOperations,
    }

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        model: type,
        deleted_field: str = "deleted",
    ):
        self.session_factory = session_factory
        self.model = model
        self.deleted_field = deleted_field

        mapper = sa_inspect(model)
        self.identity_field = mapper.get_property_by_column(mapper.primary_key[0]).key

    def deleted_column(self):
        return column_attribute(self.model, self.deleted_field)

    def operations(self, variant: OperationVariant) -> _Operations:
        return self._families[variant](self)

    def paginator(self, config: PaginatorConfig | None = None) -> DocumentPaginator:
        return DocumentPaginator(self, config)
