# doc_paginate/pagination/dependencies.py
import logging

from fastapi import FastAPI, Query, Request, status
from fastapi.responses import JSONResponse

from doc_paginate.config import pagination_settings
from doc_paginate.exception import StoreError

from .schemas import PaginationOptions

logger = logging.getLogger(__name__)


def pagination_options(
    page: int | None = Query(None, ge=1),
    limit: int | None = Query(None, ge=0, le=pagination_settings.MAX_LIMIT),
    offset: int | None = Query(None, ge=0),
    sort: str | None = Query(None),
    select: str | None = Query(None),
    populate: list[str] | None = Query(None),
    lean: bool | None = Query(None),
) -> PaginationOptions:
    # Parameters left out of the request stay unset so paginator defaults apply
    params = {
        "page": page,
        "limit": limit,
        "offset": offset,
        "sort": sort,
        "select": select,
        "populate": populate,
        "lean": lean,
    }
    return PaginationOptions.model_validate(
        {name: value for name, value in params.items() if value is not None}
    )


async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    logger.warning("Store failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "The document store could not complete the request."},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StoreError, store_error_handler)
