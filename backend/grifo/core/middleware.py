"""
Middleware de tratamento de exceções.

Converte exceções em respostas HTTP padronizadas.
"""

import traceback
import uuid

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from grifo.core.config import settings
from grifo.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BusinessRuleError,
    GrifoException,
    ResourceAlreadyExistsError,
    ResourceNotFoundError,
    StorageError,
    UpstreamUnavailableError,
    ValidationError,
)

logger = structlog.get_logger()

# Ordem importa: a primeira classe compatível define o status
STATUS_MAP: list[tuple[type[GrifoException], int]] = [
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (AuthorizationError, status.HTTP_403_FORBIDDEN),
    (ResourceNotFoundError, status.HTTP_404_NOT_FOUND),
    (ResourceAlreadyExistsError, status.HTTP_409_CONFLICT),
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (BusinessRuleError, status.HTTP_400_BAD_REQUEST),
    (StorageError, status.HTTP_400_BAD_REQUEST),
    (UpstreamUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
]


def create_error_response(
    status_code: int,
    code: str,
    message: str,
    details: dict | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Cria resposta de erro padronizada."""
    content = {
        "success": False,
        "error": {
            "code": code,
            "message": message,
        },
    }
    if details and settings.DEBUG:
        content["error"]["details"] = details

    return JSONResponse(status_code=status_code, content=content, headers=headers)


def status_for(exc: GrifoException) -> int:
    """Mapeia exceção de domínio para status HTTP."""
    for exc_type, http_status in STATUS_MAP:
        if isinstance(exc, exc_type):
            return http_status
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def grifo_exception_handler(request: Request, exc: GrifoException) -> JSONResponse:
    """Handler para exceções de domínio."""
    status_code = status_for(exc)

    logger.warning(
        "Grifo exception",
        code=exc.code,
        message=exc.message,
        path=request.url.path,
        status_code=status_code,
        details=exc.details,
    )

    headers = None
    if status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}

    return create_error_response(
        status_code=status_code,
        code=exc.code,
        message=exc.message,
        details=exc.details,
        headers=headers,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler para exceções não tratadas."""
    logger.error(
        "Unhandled exception",
        exc_type=type(exc).__name__,
        message=str(exc),
        path=request.url.path,
        traceback=traceback.format_exc() if settings.DEBUG else None,
    )

    message = "Erro interno do servidor"
    details = None

    if settings.DEBUG:
        message = str(exc)
        details = {"traceback": traceback.format_exc()}

    return create_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        code="INTERNAL_ERROR",
        message=message,
        details=details,
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Registra handlers de exceção na aplicação."""
    app.add_exception_handler(GrifoException, grifo_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)


class RequestContextMiddleware:
    """
    Middleware para adicionar contexto às requisições.

    Adiciona request_id ao contexto de log e ao header da resposta.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = str(uuid.uuid4())[:8]

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            path=scope.get("path", ""),
            method=scope.get("method", ""),
        )

        async def send_wrapper(message):
            if message["type"] == "http.response.start":
                headers = list(message.get("headers", []))
                headers.append((b"x-request-id", request_id.encode()))
                message["headers"] = headers
            await send(message)

        await self.app(scope, receive, send_wrapper)
