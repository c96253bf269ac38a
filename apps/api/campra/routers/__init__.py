"""API routers."""

from campra.routers.admin_emoji import router as admin_emoji_router
from campra.routers.drive import router as drive_router
from campra.routers.emojis import router as emojis_router
from campra.routers.release import router as release_router
from campra.routers.schools import router as schools_router

__all__ = [
    "admin_emoji_router",
    "drive_router",
    "emojis_router",
    "release_router",
    "schools_router",
]
