from clarity_api.api.routes.auth import router as auth_router
from clarity_api.api.routes.profiles import router as profiles_router
from clarity_api.api.routes.projects import router as projects_router
from clarity_api.api.routes.labels import router as labels_router
from clarity_api.api.routes.images import router as images_router
from clarity_api.api.routes.annotations import router as annotations_router

__all__ = [
    "auth_router",
    "profiles_router",
    "projects_router",
    "labels_router",
    "images_router",
    "annotations_router",
]
