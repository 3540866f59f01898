from contextlib import asynccontextmanager
from functools import lru_cache
import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from maispec.api.routers.documents import build_documents_router
from maispec.api.routers.system import router as system_router
from maispec.collaborators import ExportClient, GenerationClient
from maispec.config import settings
from maispec.observability import (
    configure_logging,
    normalize_request_id,
    reset_request_id,
    sanitize_for_logging,
    set_request_id,
)
from maispec.store import DocumentStore

logger = logging.getLogger("maispec.api")


@lru_cache(maxsize=1)
def _cached_document_store() -> DocumentStore:
    return DocumentStore()


def get_document_store() -> DocumentStore:
    return _cached_document_store()


def get_generation_client() -> GenerationClient:
    return GenerationClient(settings)


def get_export_client() -> ExportClient:
    return ExportClient(settings)


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging(settings.log_level)
    logger.info(
        "application_startup",
        extra={
            "event": "application_startup",
            "environment": settings.app_env,
            "generation_base_url": settings.generation_base_url,
            "export_base_url": settings.export_base_url,
        },
    )
    yield
    logger.info("application_shutdown", extra={"event": "application_shutdown"})


def create_app() -> FastAPI:
    cors_origins = settings.cors_origins_list
    if settings.cors_allow_credentials and any(origin == "*" for origin in cors_origins):
        raise RuntimeError("Invalid CORS_ORIGINS: wildcard '*' is not allowed when credentials are enabled.")

    app = FastAPI(title=settings.app_name, version="0.1.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["GET", "POST", "PUT"],
        allow_headers=["Content-Type", settings.request_id_header],
        expose_headers=["Content-Disposition", settings.request_id_header],
    )

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        request_id = normalize_request_id(request.headers.get(settings.request_id_header))
        request.state.request_id = request_id
        token = set_request_id(request_id)
        started = time.perf_counter()

        logger.info(
            "request_started",
            extra={
                "event": "request_started",
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "query": sanitize_for_logging(dict(request.query_params)),
                "client_ip": request.client.host if request.client else None,
            },
        )

        try:
            response = await call_next(request)
            elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
            response.headers[settings.request_id_header] = request_id
            logger.info(
                "request_completed",
                extra={
                    "event": "request_completed",
                    "request_id": request_id,
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": elapsed_ms,
                },
            )
            return response
        except Exception:
            elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
            logger.exception(
                "request_failed",
                extra={
                    "event": "request_failed",
                    "request_id": request_id,
                    "method": request.method,
                    "path": request.url.path,
                    "duration_ms": elapsed_ms,
                },
            )
            raise
        finally:
            reset_request_id(token)

    app.include_router(system_router)
    # Resolve the getters per request so tests can swap them on this module.
    app.include_router(
        build_documents_router(
            get_store=lambda: get_document_store(),
            get_generation_client=lambda: get_generation_client(),
            get_export_client=lambda: get_export_client(),
        )
    )
    return app


app = create_app()


def run() -> None:
    import uvicorn

    uvicorn.run("maispec.main:app", host=settings.app_host, port=settings.app_port)
