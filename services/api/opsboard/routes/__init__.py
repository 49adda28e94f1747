"""API routes."""

from fastapi import APIRouter

from opsboard.routes import dashboard, inventory, search, uploads

api_router = APIRouter()

# Dashboard views (pulse, P&L, temperature, reorder, reprice)
api_router.include_router(dashboard.router, prefix="/api/dashboard", tags=["dashboard"])

# Inventory browser
api_router.include_router(inventory.router, prefix="/api/inventory", tags=["inventory"])

# Global search + product detail
api_router.include_router(search.router, prefix="/api", tags=["search"])

# Report ingestion and data management
api_router.include_router(uploads.router, prefix="/api", tags=["uploads"])
