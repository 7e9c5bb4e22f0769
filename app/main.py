# app/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from agents.response_assembler import error_payload
from app.api.routes import router as api_router
from app.config import get_settings

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """コンソールにログを出すハンドラをルートロガーに1つだけ付ける。"""
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter(
                "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s",
                "%Y-%m-%d %H:%M:%S",
            )
        )
        root.addHandler(handler)
    root.setLevel(level.upper())


def create_app() -> FastAPI:
    configure_logging(get_settings().log_level)

    app = FastAPI(title="SEO Competitor Advisor")
    app.include_router(api_router, prefix="/api")

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.info("[api] invalid request path=%s errors=%s", request.url.path, exc.errors())
        return JSONResponse(
            status_code=400,
            content=error_payload("Invalid request", exc).model_dump(by_alias=True),
        )

    @app.exception_handler(Exception)
    async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("[api] unhandled error path=%s", request.url.path)
        return JSONResponse(
            status_code=500,
            content=error_payload("Internal server error", exc).model_dump(by_alias=True),
        )

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    return app


app = create_app()
