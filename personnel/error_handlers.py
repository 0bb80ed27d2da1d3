from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from personnel.exceptions import PersonnelError, StorageFailure

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """
    Map repository failures onto HTTP responses.

    - ValidationError / InvalidTransition -> 422, NotFound -> 404
    - StorageFailure -> 500 with an opaque body (details stay in the log)
    - malformed payloads / query params -> 422
    """

    @app.exception_handler(PersonnelError)
    async def personnel_error_handler(request: Request, exc: PersonnelError) -> JSONResponse:
        if isinstance(exc, StorageFailure):
            logger.error("Storage failure path=%s method=%s op=%s", request.url.path, request.method, exc.operation)
        else:
            logger.info("Rejected request path=%s method=%s code=%s: %s", request.url.path, request.method, exc.code, exc.message)
        return JSONResponse(status_code=exc.http_status, content=exc.to_response())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.info("Invalid payload path=%s method=%s", request.url.path, request.method)
        return JSONResponse(
            status_code=422,
            content={
                "error": "invalid payload",
                "code": "INVALID_PAYLOAD",
                "details": [
                    {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
                    for err in exc.errors()
                ],
            },
        )
