# doc_paginate/store/query.py
import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import load_only
from sqlalchemy.sql.elements import ColumnElement

from doc_paginate.exception import StoreError
from doc_paginate.pagination.constants import OperationVariant

from .filters import (
    build_criteria,
    join_columns_for,
    parse_select,
    parse_sort,
    populate_loader,
    relation_tree,
    to_plain,
)

logger = logging.getLogger(__name__)

Visibility = Callable[[], list[ColumnElement]]


@contextmanager
def store_errors(operation: str, variant: OperationVariant) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        logger.warning("%s under %s failed: %s", operation, variant.value, exc)
        raise StoreError(str(exc), operation=operation, variant=variant.value) from exc


class CountQuery:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        model: type,
        filters: Any,
        visibility: Visibility,
        variant: OperationVariant,
    ):
        self._session_factory = session_factory
        self._model = model
        self._filters = filters
        self._visibility = visibility
        self._variant = variant

    async def execute(self) -> int:
        with store_errors("count", self._variant):
            stmt = (
                select(func.count())
                .select_from(self._model)
                .where(*self._visibility(), *build_criteria(self._model, self._filters))
            )
            async with self._session_factory() as session:
                return await session.scalar(stmt)


class FindQuery:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        model: type,
        filters: Any,
        visibility: Visibility,
        variant: OperationVariant,
    ):
        self._session_factory = session_factory
        self._model = model
        self._filters = filters
        self._visibility = visibility
        self._variant = variant
        self._select = None
        self._sort = None
        self._skip: int | None = None
        self._limit: int | None = None
        self._lean = False
        self._populate: list[Any] = []

    def select(self, spec: Any) -> "FindQuery":
        self._select = spec
        return self

    def sort(self, spec: Any) -> "FindQuery":
        self._sort = spec
        return self

    def skip(self, n: int) -> "FindQuery":
        self._skip = n
        return self

    def limit(self, n: int) -> "FindQuery":
        self._limit = n
        return self

    def lean(self, enabled: bool = True) -> "FindQuery":
        self._lean = enabled
        return self

    def populate(self, item: Any) -> "FindQuery":
        self._populate.append(item)
        return self

    def _projection(self) -> tuple[list | None, set[str]]:
        """Columns to load, and the join-only keys the projection left out."""
        columns = parse_select(self._model, self._select)
        if columns is None:
            return None, set()
        joins = [
            column
            for item in self._populate
            for column in join_columns_for(self._model, item)
        ]
        hidden = {column.key for column in joins} - {column.key for column in columns}
        return columns + joins, hidden

    def statement(self):
        stmt = select(self._model).where(
            *self._visibility(), *build_criteria(self._model, self._filters)
        )

        columns, _ = self._projection()
        if columns is not None:
            stmt = stmt.options(load_only(*columns))

        order = parse_sort(self._model, self._sort)
        if order:
            stmt = stmt.order_by(*order)

        # Non-positive skip/limit mean "from the start" and "no bound"
        if self._skip is not None and self._skip > 0:
            stmt = stmt.offset(self._skip)
        if self._limit is not None and self._limit > 0:
            stmt = stmt.limit(self._limit)

        for item in self._populate:
            stmt = stmt.options(populate_loader(self._model, item))
        return stmt

    async def execute(self) -> list[Any]:
        with store_errors("find", self._variant):
            stmt = self.statement()
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                records = list(result.scalars().all())

            if not self._lean:
                return records

            _, hidden = self._projection()
            relations = relation_tree(self._populate)
            plain = []
            for record in records:
                values = to_plain(record, relations)
                for key in hidden:
                    values.pop(key, None)
                plain.append(values)
            return plain
