# doc_paginate/exception.py


class StoreError(Exception):
    """A count or find operation failed inside the document store."""

    def __init__(self, message: str, operation: str | None = None, variant: str | None = None):
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.variant = variant

    def __str__(self) -> str:
        if self.operation is None:
            return self.message
        return f"{self.operation} ({self.variant or 'default'}): {self.message}"
