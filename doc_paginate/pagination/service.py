# doc_paginate/pagination/service.py
import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict

from doc_paginate.config import PaginationSettings, pagination_settings

from .constants import ID_FIELD, OperationVariant
from .protocols import CollectionOperations, StoreGateway
from .schemas import Page, PaginationOptions

logger = logging.getLogger(__name__)

Callback = Callable[[BaseException | None, Page | None], Any]


async def paginate(
    gateway: StoreGateway,
    filters: Any,
    options: PaginationOptions,
    variant: OperationVariant = OperationVariant.DEFAULT,
) -> Page:
    """Count and fetch one page of ``filters`` matches under ``variant``.

    Both store operations are issued together. The first failure is raised
    as is and no page is built; the other operation is not cancelled.
    """
    position = options.position()
    operations = gateway.operations(variant)
    logger.debug(
        "Paginating %s: skip=%s limit=%s",
        variant.value,
        position.skip,
        options.effective_limit,
    )

    if options.effective_limit:
        fetch = _fetch(operations, filters, options, position.skip, gateway.identity_field)
    else:
        fetch = _nothing()

    total, docs = await asyncio.gather(_count(operations, filters), fetch)
    return Page.assemble(docs, total, options.effective_limit, position)


async def _count(operations: CollectionOperations, filters: Any) -> int:
    return await operations.count(filters).execute()


async def _nothing() -> list[Any]:
    return []


async def _fetch(
    operations: CollectionOperations,
    filters: Any,
    options: PaginationOptions,
    skip: int,
    identity_field: str,
) -> list[Any]:
    query = (
        operations.find(filters)
        .select(options.select)
        .sort(options.sort)
        .skip(skip)
        .limit(options.effective_limit)
        .lean(options.is_lean)
    )
    for item in options.populate_items:
        query.populate(item)

    docs = await query.execute()

    if options.is_lean and options.lean_with_id:
        for doc in docs:
            doc[ID_FIELD] = str(doc[identity_field])

    return docs


async def deliver(pending: Awaitable[Page], callback: Callback | None = None) -> Page:
    """Await ``pending`` and report the outcome to ``callback`` as well.

    The callback gets ``(None, page)`` or ``(error, None)``; the error is
    still raised to whoever awaits. A failing callback is logged and never
    changes that outcome.
    """
    try:
        page = await pending
    except Exception as exc:
        if callback is not None:
            await _call(callback, exc, None)
        raise
    if callback is not None:
        await _call(callback, None, page)
    return page


async def _call(callback: Callback, error: BaseException | None, page: Page | None) -> None:
    try:
        result = callback(error, page)
        if inspect.isawaitable(result):
            await result
    except Exception:
        logger.exception("Pagination callback %r failed", callback)


class PaginatorConfig(BaseModel):
    """Default options for each visibility scope of a DocumentPaginator."""

    default: PaginationOptions = PaginationOptions()
    deleted: PaginationOptions = PaginationOptions()
    with_deleted: PaginationOptions = PaginationOptions()

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_settings(cls, config: PaginationSettings | None = None) -> "PaginatorConfig":
        config = config or pagination_settings
        defaults = PaginationOptions(
            limit=config.DEFAULT_LIMIT, lean_with_id=config.LEAN_WITH_ID
        )
        return cls(default=defaults, deleted=defaults, with_deleted=defaults)

    def for_variant(self, variant: OperationVariant) -> PaginationOptions:
        if variant is OperationVariant.DELETED:
            return self.deleted
        if variant is OperationVariant.WITH_DELETED:
            return self.with_deleted
        return self.default


OptionsInput = PaginationOptions | Mapping[str, Any] | None


class DocumentPaginator:
    def __init__(self, gateway: StoreGateway, config: PaginatorConfig | None = None):
        self.gateway = gateway
        self.config = config or PaginatorConfig.from_settings()

    async def paginate(
        self, filters: Any = None, options: OptionsInput = None, callback: Callback | None = None
    ) -> Page:
        return await self._dispatch(OperationVariant.DEFAULT, filters, options, callback)

    async def paginate_deleted(
        self, filters: Any = None, options: OptionsInput = None, callback: Callback | None = None
    ) -> Page:
        return await self._dispatch(OperationVariant.DELETED, filters, options, callback)

    async def paginate_with_deleted(
        self, filters: Any = None, options: OptionsInput = None, callback: Callback | None = None
    ) -> Page:
        return await self._dispatch(OperationVariant.WITH_DELETED, filters, options, callback)

    async def _dispatch(
        self,
        variant: OperationVariant,
        filters: Any,
        options: OptionsInput,
        callback: Callback | None,
    ) -> Page:
        return await deliver(self._run(variant, filters, options), callback)

    async def _run(self, variant: OperationVariant, filters: Any, options: OptionsInput) -> Page:
        if options is None:
            options = PaginationOptions()
        elif not isinstance(options, PaginationOptions):
            options = PaginationOptions.model_validate(dict(options))

        merged = options.merged_over(self.config.for_variant(variant))
        return await paginate(
            self.gateway, {} if filters is None else filters, merged, variant
        )
