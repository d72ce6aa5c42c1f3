"""Demo FastAPI application running behind the CSRF protector."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.templating import Jinja2Templates

from csrf_protector.config import Settings
from csrf_protector.logging_config import configure_logging
from csrf_protector.middleware import CSRFProtectorMiddleware
from csrf_protector.protector import CSRFProtector

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(debug=Settings.DEBUG)
    logger.info("CSRF protector demo starting", extra={"version": "0.1.0"})
    yield


def create_app(protector: CSRFProtector | None = None) -> FastAPI:
    protector = protector or CSRFProtector.init()

    app = FastAPI(
        title="CSRF Protector",
        description="Demo application protected by the CSRF protector middleware",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.protector = protector
    app.add_middleware(CSRFProtectorMiddleware, protector=protector)

    templates = Jinja2Templates(directory=str(TEMPLATE_DIR))
    app.state.templates = templates

    # Log sink failures and other faults surface as a plain 500
    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal Server Error"},
        )

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.get("/")
    async def index(request: Request):
        return templates.TemplateResponse(request, "index.html", {})

    @app.get("/search")
    async def search(request: Request):
        """Echo the query parameters the application received."""
        return {"query": dict(request.query_params)}

    @app.post("/submit")
    async def submit(request: Request):
        """Echo the form fields the application received."""
        form = await request.form()
        return {"received": {k: v for k, v in form.items() if isinstance(v, str)}}

    return app


def run():
    """Entry point for the csrf-protector demo server."""
    uvicorn.run(
        "csrf_protector.app:create_app",
        factory=True,
        host=Settings.HOST,
        port=Settings.PORT,
        reload=Settings.DEBUG,
    )


if __name__ == "__main__":
    run()
