from __future__ import annotations

from fastapi import APIRouter

from maispec.config import settings

router = APIRouter()


@router.get("/")
def root() -> dict[str, str]:
    return {"service": "maispec-backend", "status": "running"}


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok", "environment": settings.app_env}
