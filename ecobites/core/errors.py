# ecobites/core/errors.py
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from pymongo.errors import DuplicateKeyError
from starlette.exceptions import HTTPException
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)


def error_body(status_code: int, message: str) -> dict:
    return {"success": False, "message": message, "statusCode": status_code}


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(x) for x in err.get("loc", ()) if x != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


async def http_error(request: Request, exc: HTTPException):
    return JSONResponse(
        error_body(exc.status_code, str(exc.detail)),
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


async def validation_error(request: Request, exc: RequestValidationError):
    return JSONResponse(error_body(400, _validation_message(exc)), status_code=400)


async def duplicate_key(request: Request, exc: DuplicateKeyError):
    return JSONResponse(
        error_body(409, "This email is already in use. Please use a different email."),
        status_code=409,
    )


async def unhandled(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(error_body(500, str(exc) or "Internal Server Error"), status_code=500)


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HTTPException, http_error)
    app.add_exception_handler(RequestValidationError, validation_error)
    app.add_exception_handler(DuplicateKeyError, duplicate_key)
    app.add_exception_handler(Exception, unhandled)
