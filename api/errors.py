"""Exception handlers translating domain errors to HTTP responses."""

import logging
from typing import Dict, Type

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from api.schemas import error_body
from domain.shared.errors import (
    CacheReadError,
    CacheWriteError,
    ConflictError,
    NotFoundError,
    QueueError,
    RecipeServiceError,
    RepositoryError,
    SearchError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Most specific classes first: lookup walks the MRO
STATUS_BY_ERROR: Dict[Type[RecipeServiceError], int] = {
    ValidationError: 400,
    NotFoundError: 404,
    ConflictError: 409,
    CacheReadError: 503,
    CacheWriteError: 503,
    SearchError: 503,
    QueueError: 502,
    RepositoryError: 500,
}


def status_for(error: RecipeServiceError) -> int:
    for cls in type(error).__mro__:
        status = STATUS_BY_ERROR.get(cls)  # type: ignore[arg-type]
        if status is not None:
            return status
    return 500


async def handle_service_error(request: Request, exc: RecipeServiceError) -> JSONResponse:
    status = status_for(exc)
    log = logger.error if status >= 500 else logger.info
    log(
        "Request failed",
        extra={"path": request.url.path, "code": exc.code, "status": status, "context": exc.context},
    )
    return JSONResponse(status_code=status, content=jsonable_encoder(error_body(exc.to_dict())))


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {"field": ".".join(str(p) for p in err.get("loc", ())), "message": err.get("msg", "")}
        for err in exc.errors()
    ]
    error = ValidationError("Invalid request", context={"errors": details})
    return JSONResponse(status_code=400, content=jsonable_encoder(error_body(error.to_dict())))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RecipeServiceError, handle_service_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, handle_request_validation)  # type: ignore[arg-type]
