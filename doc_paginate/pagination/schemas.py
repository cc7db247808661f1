# doc_paginate/pagination/schemas.py
import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .constants import DEFAULT_LIMIT, DEFAULT_OFFSET


class PagePosition(BaseModel):
    """Where a page starts, and which of offset/page the caller asked for."""

    skip: int
    offset: int | None = None
    page: int | None = None

    model_config = ConfigDict(frozen=True)


class PaginationOptions(BaseModel):
    # select, sort and populate are handed to the store untouched
    select: Any = None
    sort: Any = None
    populate: Any = None
    # None and other falsy values read as "off" (lean) or "count only" (limit)
    lean: bool | None = False
    lean_with_id: bool | None = Field(True, alias="leanWithId")
    limit: int | None = DEFAULT_LIMIT
    offset: int | None = None
    page: int | None = None

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @property
    def populate_items(self) -> list[Any]:
        if self.populate is None:
            return []
        if isinstance(self.populate, (list, tuple)):
            return list(self.populate)
        return [self.populate]

    @property
    def effective_limit(self) -> int:
        return self.limit or 0

    @property
    def is_lean(self) -> bool:
        return bool(self.lean)

    def merged_over(self, defaults: "PaginationOptions") -> "PaginationOptions":
        """Shallow merge: fields set explicitly on self win over defaults."""
        values = {name: getattr(defaults, name) for name in defaults.model_fields_set}
        values.update({name: getattr(self, name) for name in self.model_fields_set})
        return PaginationOptions.model_validate(values)

    def position(self) -> PagePosition:
        if self.offset is not None:
            return PagePosition(skip=self.offset, offset=self.offset)
        if self.page is not None:
            return PagePosition(skip=(self.page - 1) * self.effective_limit, page=self.page)
        return PagePosition(skip=DEFAULT_OFFSET, offset=DEFAULT_OFFSET)


class Page(BaseModel):
    docs: list[Any]
    total: int
    limit: int
    offset: int | None = None
    page: int | None = None
    pages: int | None = None

    @model_validator(mode="after")
    def check_single_position(self) -> "Page":
        if self.offset is not None:
            if self.page is not None or self.pages is not None:
                raise ValueError("A page carries either offset or page/pages, not both")
        elif self.page is None or self.pages is None:
            raise ValueError("A page without offset must carry both page and pages")
        return self

    @classmethod
    def assemble(
        cls, docs: list[Any], total: int, limit: int, position: PagePosition
    ) -> "Page":
        if position.offset is not None:
            return cls(docs=docs, total=total, limit=limit, offset=position.offset)
        return cls(
            docs=docs,
            total=total,
            limit=limit,
            page=position.page,
            pages=page_count(total, limit),
        )

    def envelope(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


def page_count(total: int, limit: int) -> int:
    # A zero limit fetches nothing, so everything sits on a single page
    if not limit:
        return 1
    return max(math.ceil(total / limit), 1)
