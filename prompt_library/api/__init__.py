from fastapi import APIRouter

from prompt_library.api import auth, catalog, categories, prompts, stats

api_router = APIRouter()
api_router.include_router(prompts.router)
api_router.include_router(categories.router)
api_router.include_router(catalog.router)
api_router.include_router(stats.router)

auth_router = auth.router

__all__ = ["api_router", "auth_router"]
