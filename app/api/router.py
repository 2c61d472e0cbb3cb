from fastapi import APIRouter

from app.api.routes import health, contact

api_router = APIRouter(prefix="/api")

# 🔓 Public routes
api_router.include_router(health.router)
api_router.include_router(contact.router)
