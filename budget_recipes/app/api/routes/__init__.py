from fastapi import APIRouter

from budget_recipes.app.api.routes import discovery

api_router = APIRouter()
api_router.include_router(discovery.router)
