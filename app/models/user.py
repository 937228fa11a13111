"""
用户与认证模型模块

用户表由认证模块维护；访问令牌和密码重置令牌只保存哈希值
"""
from datetime import datetime
from typing import Optional
from pydantic import EmailStr, ValidationInfo, field_validator
from sqlalchemy import Column, ForeignKey, String
from sqlmodel import Field

from .base import SQLModelBase, TimestampMixin, IDMixin, utc_now


class UserRole:
    """用户角色（admin / recruiter 为招聘人员）"""
    ADMIN = "admin"
    RECRUITER = "recruiter"
    VIEWER = "viewer"


# ==================== 表模型 ====================

class User(TimestampMixin, IDMixin, SQLModelBase, table=True):
    """用户表模型"""
    __tablename__ = "users"

    name: str = Field(..., max_length=255, description="姓名")
    email: str = Field(..., max_length=255, unique=True, index=True, description="登录邮箱")
    password: str = Field(..., max_length=255, description="bcrypt 密码哈希")
    role: str = Field(default=UserRole.RECRUITER, max_length=32, index=True, description="角色")
    is_active: bool = Field(default=True, description="是否启用")

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"


class PersonalAccessToken(IDMixin, SQLModelBase, table=True):
    """访问令牌表模型（令牌明文只在签发时返回一次）"""
    __tablename__ = "personal_access_tokens"

    user_id: str = Field(
        sa_column=Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
        description="用户ID"
    )
    name: str = Field(default="api", max_length=255, description="令牌名称（客户端标识）")
    token_hash: str = Field(..., max_length=64, unique=True, description="令牌 SHA-256")
    last_used_at: Optional[datetime] = Field(None, description="最后使用时间")
    created_at: datetime = Field(default_factory=utc_now, nullable=False)


class PasswordResetToken(IDMixin, SQLModelBase, table=True):
    """密码重置令牌表模型（每个邮箱只保留最新一条）"""
    __tablename__ = "password_reset_tokens"

    email: str = Field(..., max_length=255, unique=True, index=True)
    token_hash: str = Field(..., max_length=64)
    created_at: datetime = Field(default_factory=utc_now, nullable=False)


# ==================== 请求 Schema ====================

class UserCreate(SQLModelBase):
    """创建用户（命令行脚本使用）"""
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=8)
    role: str = Field(UserRole.RECRUITER, max_length=32)


class LoginRequest(SQLModelBase):
    """登录请求"""
    email: EmailStr
    password: str = Field(..., min_length=1)


class ForgotPasswordRequest(SQLModelBase):
    """忘记密码请求"""
    email: EmailStr


class ResetPasswordRequest(SQLModelBase):
    """重置密码请求"""
    token: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=8)
    password_confirmation: str

    @field_validator("password_confirmation")
    @classmethod
    def check_confirmation(cls, v, info: ValidationInfo):
        if "password" in info.data and v != info.data["password"]:
            raise ValueError("两次输入的密码不一致")
        return v


# ==================== 响应 Schema ====================

class UserResponse(SQLModelBase):
    """用户信息响应"""
    id: str
    name: str
    email: str
    role: str
    is_active: bool
    created_at: datetime


class UserBrief(SQLModelBase):
    """用户简要信息（笔记作者）"""
    id: str
    name: str
    email: str


class LoginResponse(SQLModelBase):
    """登录响应"""
    token: str
    user: UserResponse
