"""
Application package initializer.

``core`` holds configuration, security and the HTTP-independent access
control rules, ``store`` the storage strategies, ``services`` the
business operations and ``api`` the FastAPI routers.  Each domain
(savings, investments, gamification, social, insights, banking)
exposes its own router in ``api/endpoints``.
"""

from .main import app  # noqa: F401
