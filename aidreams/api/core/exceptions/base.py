"""Application exception and the FastAPI handlers that render errors."""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..messages import MessageCode, get_default_message
from aidreams.utils.logger import get_logger

logger = get_logger(__name__)


class AIDreamsException(Exception):
    """Error with a message code, rendered as the API error envelope."""

    def __init__(
        self,
        message_code: MessageCode,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict | None = None,
        headers: dict | None = None,
    ):
        self.message_code = message_code
        self.status_code = status_code
        self.message: str = get_default_message(message_code)
        self.details = details or {}
        self.headers = headers or {}
        super().__init__(self.message)


def error_response(
    status_code: int,
    message_code: MessageCode,
    message: str | None = None,
    details: dict | None = None,
    headers: dict | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "message_code": message_code,
            "message": message or get_default_message(message_code),
            "details": details or {},
        },
        headers=headers,
    )


def _serializable_errors(errors) -> list[dict]:
    serializable = []
    for error in errors:
        error = dict(error)
        if hasattr(error.get("input"), "isoformat"):
            error["input"] = error["input"].isoformat()
        # ctx may hold the raised ValueError itself
        if "ctx" in error:
            error["ctx"] = {key: str(value) for key, value in error["ctx"].items()}
        serializable.append(error)
    return serializable


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AIDreamsException)
    async def aidreams_exception_handler(
        request: Request, exc: AIDreamsException
    ) -> JSONResponse:
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            "Request failed",
            path=request.url.path,
            message_code=exc.message_code.value,
            status_code=exc.status_code,
            cause=type(exc.__cause__).__name__ if exc.__cause__ else None,
        )
        return error_response(
            exc.status_code,
            exc.message_code,
            exc.message,
            exc.details,
            exc.headers,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        logger.warning(
            "HTTP exception",
            path=request.url.path,
            status_code=exc.status_code,
            detail=exc.detail,
        )
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            message_code = MessageCode.NOT_FOUND
        elif exc.status_code >= 500:
            message_code = MessageCode.INTERNAL_ERROR
        else:
            message_code = MessageCode.BAD_REQUEST
        return error_response(
            exc.status_code, message_code, str(exc.detail), headers=exc.headers
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = _serializable_errors(exc.errors())
        logger.warning(
            "Request validation failed",
            path=request.url.path,
            fields=[".".join(str(part) for part in e.get("loc", ())) for e in errors],
        )
        return error_response(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            MessageCode.INVALID_INPUT,
            details={"validation_errors": errors},
        )

    @app.exception_handler(SQLAlchemyError)
    async def sqlalchemy_exception_handler(
        request: Request, exc: SQLAlchemyError
    ) -> JSONResponse:
        logger.error(
            "Database error",
            path=request.url.path,
            exception_type=type(exc).__name__,
        )
        if isinstance(exc, IntegrityError):
            return error_response(
                status.HTTP_409_CONFLICT,
                MessageCode.BAD_REQUEST,
                "Data integrity constraint violated",
            )
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            MessageCode.INTERNAL_ERROR,
            "Database error occurred",
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.exception(
            "Unhandled exception",
            path=request.url.path,
            exception_type=type(exc).__name__,
        )
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, MessageCode.INTERNAL_ERROR
        )
