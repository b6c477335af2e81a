# app/core/errors.py
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

logger = logging.getLogger("ddsl.errors")


class NotFoundError(Exception):
    def __init__(self, entity_name: str, id=None):
        self.entity_name = entity_name
        self.id = id
        detail = f"{entity_name} {id} not found" if id is not None else f"{entity_name} not found"
        super().__init__(detail)


class BehaviorError(Exception):
    """Raised by behavior bodies to reject a request with a 400."""

    def __init__(self, message: str, status_code: int = 400):
        self.status_code = status_code
        super().__init__(message)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError):
        logger.info(f"[NOT_FOUND] {exc}")
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ValidationError)
    async def _invalid(request: Request, exc: ValidationError):
        logger.info(f"[INVALID] {exc.error_count()} error(s)")
        return JSONResponse(status_code=422, content={"detail": exc.errors(include_url=False)})

    @app.exception_handler(BehaviorError)
    async def _behavior(request: Request, exc: BehaviorError):
        logger.warning(f"[BEHAVIOR] {exc}")
        return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})
