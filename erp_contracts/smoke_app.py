"""Minimal API used to smoke-test the contract runner"""

from fastapi import APIRouter, FastAPI

from erp_contracts.config import settings

API_PREFIX = "/api/v1"

router = APIRouter()


@router.get("/health")
async def health_check():
    """Liveness probe"""
    return {"health": "ok"}


@router.get("/test")
async def test_route():
    return {"test": "working"}


def create_app() -> FastAPI:
    app = FastAPI(
        title=f"{settings.app_name} smoke server",
        version=settings.app_version,
        docs_url=None,
        redoc_url=None,
    )
    app.include_router(router, prefix=API_PREFIX, tags=["smoke"])
    return app


app = create_app()
