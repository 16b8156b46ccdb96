from fastapi import APIRouter
from gamenet.api.v1.routes.search import router as search_router
from gamenet.api.v1.routes.sessions import router as sessions_router
from gamenet.api.v1.routes.reservations import router as reservations_router
from gamenet.api.v1.routes.venues import router as venues_router
from gamenet.api.v1.routes.admin import router as admin_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(search_router)
api_router.include_router(sessions_router)
api_router.include_router(reservations_router)
api_router.include_router(venues_router)
api_router.include_router(admin_router)
