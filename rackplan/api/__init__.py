"""
api/ - REST surface over a planning session.
"""

from .endpoints import create_planning_router
from .app import create_app, create_session

__all__ = [
    "create_planning_router",
    "create_app",
    "create_session",
]
