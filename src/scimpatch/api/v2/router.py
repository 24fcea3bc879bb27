from fastapi import APIRouter
from .users import router as users_router

# Mounted under settings.api_prefix by create_app
router = APIRouter()

# Include all sub-routers
router.include_router(users_router)
