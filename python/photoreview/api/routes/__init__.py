"""HTTP routes.

Each module owns one resource family and exposes a `router`;
create_api_router() mounts them all.
"""

from fastapi import APIRouter

from photoreview.api.routes import health, libraries, photos, projects

_ROUTERS = (
    (health.router, "health"),
    (projects.router, "projects"),
    (libraries.router, "libraries"),
    (photos.router, "photos"),
)


def create_api_router() -> APIRouter:
    api_router = APIRouter()
    for router, tag in _ROUTERS:
        api_router.include_router(router, tags=[tag])
    return api_router


__all__ = ["create_api_router"]
