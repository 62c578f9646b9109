"""FastAPI app factory."""

from __future__ import annotations

import logging

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from metapattern import __version__
from metapattern.config import settings
from metapattern.errors import MetapatternError

load_dotenv()

logging.basicConfig(
    level=getattr(logging, settings.metapattern_log_level.upper(), logging.DEBUG),
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)

logger = logging.getLogger(__name__)


async def metapattern_error_handler(request: Request, exc: MetapatternError) -> JSONResponse:
    logger.warning("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


def create_app() -> FastAPI:
    app = FastAPI(
        title="metapattern",
        description="Photo metadata extraction and generative pattern rendering",
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(MetapatternError, metapattern_error_handler)

    # Importing the patterns package fires the @pattern decorators
    import metapattern.engine.patterns  # noqa: F401

    from metapattern.api.router import api_router

    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("metapattern.main:app", host=settings.host, port=settings.port)
