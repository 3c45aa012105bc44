from aiogram import Router

from .start import router as start_router
from .habits import router as habits_router


def setup_routers() -> Router:
    router = Router()
    router.include_router(start_router)
    router.include_router(habits_router)
    return router
