"""
应聘者备注模型模块

备注由招聘人员创建，创建后不可修改或删除；应聘者删除时级联删除
"""
from typing import Optional, TYPE_CHECKING
from sqlalchemy import Column, ForeignKey, String, Text
from sqlmodel import Field, Relationship

from .base import SQLModelBase, TimestampMixin, IDMixin, TimestampResponse
from .user import UserBrief

if TYPE_CHECKING:
    from .user import User


class ApplicantNoteBase(SQLModelBase):
    """备注基础字段"""
    note: str = Field(..., min_length=1, max_length=4000, sa_column=Column(Text, nullable=False), description="备注内容")


class ApplicantNote(ApplicantNoteBase, TimestampMixin, IDMixin, table=True):
    """应聘者备注表模型"""
    __tablename__ = "applicant_notes"

    applicant_id: str = Field(
        sa_column=Column(String(36), ForeignKey("applicants.id", ondelete="CASCADE"), nullable=False, index=True),
        description="应聘者ID"
    )
    user_id: str = Field(
        sa_column=Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
        description="作者ID"
    )

    # 关联关系
    user: Optional["User"] = Relationship(sa_relationship_kwargs={"lazy": "selectin"})

    def __repr__(self) -> str:
        return f"<ApplicantNote(id={self.id}, applicant_id={self.applicant_id})>"


class ApplicantNoteCreate(ApplicantNoteBase):
    """创建备注请求"""
    pass


class ApplicantNoteResponse(TimestampResponse):
    """备注响应"""
    applicant_id: str
    user_id: str
    note: str
    user: Optional[UserBrief] = None
