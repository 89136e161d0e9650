"""
Top-level API router.

Aggregates the domain routers.  Every domain router declares its full
paths (``/users/{user_id}/...`` next to ``/portfolios/{id}``) because
most domains expose both shapes, so none of them is mounted with its
own prefix.  ``main.create_app`` mounts this router under ``/api``.
"""

from fastapi import APIRouter

from .endpoints import banking, gamification, insights, investments, savings, social, users

router = APIRouter()

router.include_router(users.router, tags=["users"])
router.include_router(savings.router, tags=["savings"])
router.include_router(investments.router, tags=["investments"])
router.include_router(gamification.router, tags=["gamification"])
router.include_router(social.router, tags=["social"])
router.include_router(insights.router, tags=["insights"])
router.include_router(banking.router, tags=["banking"])
