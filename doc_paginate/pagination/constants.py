# doc_paginate/pagination/constants.py
from enum import Enum

DEFAULT_LIMIT = 10
DEFAULT_OFFSET = 0
ID_FIELD = "id"


class OperationVariant(str, Enum):
    """Which visibility scope the count/find operations run under."""

    DEFAULT = "default"
    DELETED = "deleted"
    WITH_DELETED = "with_deleted"
