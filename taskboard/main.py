"""
Taskboard API application.

Run with ``taskboard`` (installed script) or ``uvicorn taskboard.main:app``.
"""
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taskboard import models  # noqa: F401  (registers the mappers on Base)
from taskboard.api.v1 import boards, columns, tasks
from taskboard.config import settings
from taskboard.database import Base, engine
from taskboard.error_handlers import register_error_handlers

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


def configure_logging(level: str = None) -> None:
    logging.basicConfig(
        level=getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    logger.info("%s %s started", settings.APP_NAME, settings.APP_VERSION)
    yield
    logger.info("%s shutting down", settings.APP_NAME)


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    app.include_router(boards.router, prefix=f"{API_PREFIX}/boards", tags=["boards"])
    app.include_router(columns.router, prefix=API_PREFIX, tags=["columns"])
    app.include_router(tasks.router, prefix=API_PREFIX, tags=["tasks"])

    @app.get("/health")
    def health():
        return {"success": True, "message": "ok"}

    return app


app = create_app()


def run() -> None:
    configure_logging()
    uvicorn.run("taskboard.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)


if __name__ == "__main__":
    run()
