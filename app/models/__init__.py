"""
SQLModel 模型模块

使用 SQLModel 统一 ORM Model 和 Pydantic Schema
"""
from .base import SQLModelBase, TimestampMixin, IDMixin, TimestampResponse
from .position import Position, PositionCreate, PositionUpdate, PositionResponse
from .applicant import (
    Applicant, ApplicantCreate, ApplicantUpdate, ApplicantResponse, ApplicantFilter, ApplicantStatus,
    StatusCount, PositionCount, DashboardOverview,
)
from .note import ApplicantNote, ApplicantNoteCreate, ApplicantNoteResponse
from .user import (
    User, UserRole, PersonalAccessToken, PasswordResetToken, UserCreate, UserResponse, UserBrief,
    LoginRequest, LoginResponse, ForgotPasswordRequest, ResetPasswordRequest,
)

__all__ = [
    # Base
    "SQLModelBase",
    "TimestampMixin",
    "IDMixin",
    "TimestampResponse",
    # Position
    "Position",
    "PositionCreate",
    "PositionUpdate",
    "PositionResponse",
    # Applicant
    "Applicant",
    "ApplicantCreate",
    "ApplicantUpdate",
    "ApplicantResponse",
    "ApplicantFilter",
    "ApplicantStatus",
    "StatusCount",
    "PositionCount",
    "DashboardOverview",
    # Note
    "ApplicantNote",
    "ApplicantNoteCreate",
    "ApplicantNoteResponse",
    # User / Auth
    "User",
    "UserRole",
    "PersonalAccessToken",
    "PasswordResetToken",
    "UserCreate",
    "UserResponse",
    "UserBrief",
    "LoginRequest",
    "LoginResponse",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
]
