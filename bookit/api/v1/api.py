from fastapi import APIRouter
from bookit.api.v1.routes.public import router as public_router
from bookit.api.v1.routes.bookings import router as bookings_router
from bookit.api.v1.routes.promo import router as promo_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(public_router)
api_router.include_router(bookings_router)
api_router.include_router(promo_router)
