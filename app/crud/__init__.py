"""
CRUD 操作模块
"""
from .position import position_crud
from .applicant import applicant_crud
from .note import note_crud
from .user import user_crud, AuthContext

__all__ = [
    "position_crud",
    "applicant_crud",
    "note_crud",
    "user_crud",
    "AuthContext",
]
