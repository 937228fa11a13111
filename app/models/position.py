"""
岗位模型模块 - SQLModel 版本

合并了 Model 和 Schema，减少代码重复。
岗位与 Applicant.position_applied_for 之间没有外键约束。
"""
from typing import Optional
from pydantic import field_validator
from sqlalchemy import Column, Text
from sqlmodel import Field

from .base import SQLModelBase, TimestampMixin, IDMixin, TimestampResponse


# ==================== 基础字段定义 ====================

class PositionBase(SQLModelBase):
    """岗位基础字段 - 用于创建和继承"""
    title: str = Field(..., min_length=1, max_length=255, description="岗位名称", index=True)
    description: Optional[str] = Field(
        None, max_length=4000, sa_column=Column(Text, nullable=True), description="岗位描述"
    )
    location: str = Field(..., min_length=1, max_length=255, description="工作地点")
    salary_min: Optional[float] = Field(None, ge=0, description="最低薪资")
    salary_max: Optional[float] = Field(None, ge=0, description="最高薪资")


# ==================== 表模型 ====================

class Position(PositionBase, TimestampMixin, IDMixin, table=True):
    """岗位表模型"""
    __tablename__ = "positions"

    is_active: bool = Field(default=True, index=True, description="是否启用")

    def __repr__(self) -> str:
        return f"<Position(id={self.id}, title={self.title})>"


# ==================== 请求 Schema ====================

class PositionCreate(PositionBase):
    """创建岗位请求"""
    is_active: bool = True


class PositionUpdate(SQLModelBase):
    """更新岗位请求 - 所有字段可选"""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=4000)
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    salary_min: Optional[float] = Field(None, ge=0)
    salary_max: Optional[float] = Field(None, ge=0)
    is_active: Optional[bool] = None

    @field_validator("title", "location", "is_active", mode="before")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("该字段不能为空")
        return v


# ==================== 响应 Schema ====================

class PositionResponse(TimestampResponse):
    """岗位详情响应"""
    title: str
    description: Optional[str]
    location: str
    salary_min: Optional[float]
    salary_max: Optional[float]
    is_active: bool
