import sys
import time
from contextlib import asynccontextmanager
from uuid import uuid4

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger
from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from photoweb.config import Settings, settings
from photoweb.errors import PhotowebError
from photoweb.routes.demo import router as demo_router
from photoweb.routes.health import router as health_router
from photoweb.routes.images import router as images_router
from photoweb.routes.upload import router as upload_router
from photoweb.services.render import ViewRenderer
from photoweb.services.storage import ImageStorage

ASSETS_PREFIX = "/assets"


def _configure_logging(app_settings: Settings) -> None:
    logger.configure(patcher=lambda record: record["extra"].setdefault("request_id", "-"))
    logger.remove()
    logger.add(
        sys.stderr,
        level=app_settings.log_level.upper(),
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | req={extra[request_id]} | {name}:{function}:{line} | {message}",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    app_settings: Settings = app.state.settings
    _configure_logging(app_settings)
    app.state.storage.ensure_root()
    if not app_settings.static_path.is_dir():
        raise FileNotFoundError(f"Static directory not found: {app_settings.static_path}")
    app.state.renderer = ViewRenderer.load(app_settings.views_path)
    logger.bind(request_id="-").info(
        "Starting app app_name={} debug={} log_level={} upload_dir={} views={}",
        app_settings.app_name,
        app_settings.debug,
        app_settings.log_level,
        app_settings.upload_dir,
        app.state.renderer.names,
    )
    yield
    logger.bind(request_id="-").info("Shutting down app app_name={}", app_settings.app_name)


class RequestContextMiddleware:
    """Log each request and keep a handler fault from leaving its request.

    Any ``Exception`` raised while handling the request becomes a 500 carrying
    the exception text. ``BaseException`` subclasses outside ``Exception``
    (cancellation, interpreter exit) are not converted and keep propagating.
    Everything logged while the request runs carries its request id.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        request_id = request.headers.get("x-request-id", str(uuid4()))
        status_code = 500
        response_started = False

        async def send_with_request_id(message: Message) -> None:
            nonlocal status_code, response_started
            if message["type"] == "http.response.start":
                response_started = True
                status_code = message["status"]
                MutableHeaders(scope=message)["X-Request-ID"] = request_id
            await send(message)

        with logger.contextualize(request_id=request_id):
            start = time.perf_counter()
            logger.info("Request start method={} path={}", request.method, request.url.path)
            try:
                await self.app(scope, receive, send_with_request_id)
            except Exception as exc:
                logger.exception("Request failed method={} path={}", request.method, request.url.path)
                if response_started:
                    raise
                response = PlainTextResponse(str(exc), status_code=500)
                await response(scope, receive, send_with_request_id)
            duration_ms = (time.perf_counter() - start) * 1000
            logger.info(
                "Request finish method={} path={} status={} duration_ms={:.2f}",
                request.method,
                request.url.path,
                status_code,
                duration_ms,
            )


async def handle_photoweb_error(request: Request, exc: PhotowebError) -> PlainTextResponse:
    logger.warning(
        "Request error path={} error_type={} status={} error={}",
        request.url.path,
        type(exc).__name__,
        exc.status_code,
        str(exc),
    )
    return PlainTextResponse(str(exc), status_code=exc.status_code)


def create_app(app_settings: Settings | None = None) -> FastAPI:
    app_settings = app_settings or settings
    app = FastAPI(title=app_settings.app_name, debug=app_settings.debug, lifespan=lifespan)
    app.state.settings = app_settings
    app.state.storage = ImageStorage(app_settings.upload_path, chunk_size=app_settings.chunk_size)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestContextMiddleware)
    app.add_exception_handler(PhotowebError, handle_photoweb_error)

    app.include_router(health_router)
    app.include_router(upload_router)
    app.include_router(images_router)
    app.include_router(demo_router)

    # Files only: a missing path is a 404 and directories are never listed.
    app.mount(
        ASSETS_PREFIX,
        StaticFiles(directory=str(app_settings.static_path), html=False, check_dir=False),
        name="assets",
    )
    return app


app = create_app()


def run() -> None:
    uvicorn.run(
        "photoweb.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
