"""
API v1 路由模块
"""
from . import public, applicants, notes, positions, dashboard, auth

__all__ = [
    "public",
    "applicants",
    "notes",
    "positions",
    "dashboard",
    "auth",
]
