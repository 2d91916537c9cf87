from fastapi import APIRouter
from rentclub.api.v1.endpoints import (
    auth,
    profiles,
    properties,
    bookings,
    reviews,
    galleries,
    promotions,
    members,
    rewards,
    payments,
    admin,
)

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])
api_router.include_router(profiles.router, prefix="/profiles", tags=["profiles"])
api_router.include_router(properties.router, prefix="/properties", tags=["properties"])
api_router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
api_router.include_router(reviews.router, prefix="/reviews", tags=["reviews"])
api_router.include_router(galleries.router, prefix="/galleries", tags=["galleries"])
api_router.include_router(promotions.router, prefix="/promotions", tags=["promotions"])
api_router.include_router(members.router, prefix="/members", tags=["members"])
api_router.include_router(rewards.router, prefix="/rewards", tags=["rewards"])
api_router.include_router(payments.router, prefix="/payments", tags=["payments"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
