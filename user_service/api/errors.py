"""Exception handlers producing the error envelope."""

import logging
from http import HTTPStatus

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from user_service.errors import AppError, InternalError, InvalidInput, NotFound, Unauthorized
from user_service.schemas.envelope import ErrorEnvelope, ErrorInfo
from user_service.services.validation import describe_errors

logger = logging.getLogger(__name__)

STATUS_ERRORS = {
    status.HTTP_400_BAD_REQUEST: InvalidInput,
    status.HTTP_401_UNAUTHORIZED: Unauthorized,
    status.HTTP_404_NOT_FOUND: NotFound,
}


def error_response(error: AppError, headers: dict[str, str] | None = None) -> JSONResponse:
    envelope = ErrorEnvelope(error=ErrorInfo(code=error.code, message=error.message))
    return JSONResponse(
        status_code=error.status_code,
        content=envelope.model_dump(),
        headers=headers,
    )


async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    if isinstance(exc, InternalError):
        logger.error(
            f"{request.method} {request.url.path} failed: {exc.detail}",
            exc_info=exc,
        )
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code} {exc.code}")

    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthorized) else None
    return error_response(exc, headers)


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    # Body is not valid JSON, or not a JSON object
    errors = exc.errors()
    if any(error.get("type") == "json_invalid" for error in errors):
        message = "Malformed JSON body"
    else:
        message = f"Invalid input data: {describe_errors(errors)}"
    logger.info(f"{request.method} {request.url.path} -> 400 {message}")
    return error_response(InvalidInput(message))


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    error_cls = STATUS_ERRORS.get(exc.status_code)
    if error_cls is not None:
        error = error_cls()
    else:
        error = AppError(str(exc.detail))
        error.status_code = exc.status_code
        error.code = HTTPStatus(exc.status_code).name
    return error_response(error, getattr(exc, "headers", None))


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return error_response(InternalError())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected_error)
