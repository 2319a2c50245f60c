from typing import Any, Optional
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlrepo.exceptions.errors import RecordNotFound, RepositoryException
from sqlrepo.logging.logger import get_logger
from sqlrepo.config import settings


class ErrorResponse(BaseModel):
    code: int = 500
    message: str = "error"
    data: Optional[Any] = None


def repository_exception_handler(request: Request, exc: RepositoryException):
    """Render repository exceptions as JSON error envelopes."""
    trace_id = getattr(request.state, "trace_id", "unknown")
    logger = get_logger("exception_handler", request)

    if isinstance(exc, RecordNotFound):
        logger.warning(f"Trace[{trace_id}] - RecordNotFound: {exc.message}")
        body = ErrorResponse(code=exc.code, message=exc.message, data=exc.detail)
    elif exc.status_code < 500:
        logger.warning(f"Trace[{trace_id}] - RepositoryError: {exc.message}")
        body = ErrorResponse(code=exc.code, message=exc.message)
    else:
        logger.opt(exception=exc).error(f"Trace[{trace_id}] - RepositoryError: {exc.message}")
        body = ErrorResponse(
            code=exc.code,
            message="Repository misconfigured",
            data={"trace_id": trace_id, "detail": exc.detail} if settings.DEBUG else None,
        )

    return JSONResponse(status_code=exc.status_code, content=body.model_dump(mode="json"))


def register_exception_handlers(app: FastAPI) -> None:
    """Install repository exception handlers on an application."""
    app.add_exception_handler(RepositoryException, repository_exception_handler)
