# doc_paginate/pagination/protocols.py
from typing import Any, Protocol

from .constants import OperationVariant


class CountHandle(Protocol):
    async def execute(self) -> int: ...


class FindHandle(Protocol):
    """Chainable find. Every configuration call returns the same handle."""

    def select(self, spec: Any) -> "FindHandle": ...

    def sort(self, spec: Any) -> "FindHandle": ...

    def skip(self, n: int) -> "FindHandle": ...

    def limit(self, n: int) -> "FindHandle": ...

    def lean(self, enabled: bool = True) -> "FindHandle": ...

    def populate(self, item: Any) -> "FindHandle": ...

    async def execute(self) -> list[Any]: ...


class CollectionOperations(Protocol):
    def count(self, filters: Any) -> CountHandle: ...

    def find(self, filters: Any) -> FindHandle: ...


class StoreGateway(Protocol):
    # Key holding a lean record's internal identity value
    identity_field: str

    def operations(self, variant: OperationVariant) -> CollectionOperations: ...
