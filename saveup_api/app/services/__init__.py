"""
Service layer for the SaveUp API.

Services hold the business operations that combine several store
calls.  Each service is constructed with the application's store.
"""

from .finance_service import FinanceService
from .gamification_service import GamificationService
from .resource_service import ResourceService
from .social_service import SocialService
from .user_service import UserService

__all__ = [
    "FinanceService",
    "GamificationService",
    "ResourceService",
    "SocialService",
    "UserService",
]
