"""
应聘者模型模块 - SQLModel 版本

Applicant 是系统的核心表，每次投递一条记录。
应聘岗位 position_applied_for 为自由文本，不与 positions 表关联，
岗位下线或删除后历史申请仍然保留。
"""
from datetime import date
from enum import Enum
from typing import Any, Optional

from pydantic import EmailStr, field_validator
from sqlalchemy import Column, String, Text
from sqlmodel import Field

from .base import SQLModelBase, TimestampMixin, IDMixin, TimestampResponse


class ApplicantStatus(str, Enum):
    """应聘状态枚举（不限制流转顺序）"""
    SUBMITTED = "submitted"                      # 已提交
    UNDER_REVIEW = "under_review"                # 审核中
    SHORTLISTED = "shortlisted"                  # 入围
    INTERVIEW_SCHEDULED = "interview_scheduled"  # 已安排面试
    OFFER_EXTENDED = "offer_extended"            # 已发 Offer
    HIRED = "hired"                              # 已录用
    REJECTED = "rejected"                        # 已拒绝
    WITHDRAWN = "withdrawn"                      # 已撤回


# 创建时必填、更新时可省略但不能置空的字段
REQUIRED_FIELDS = (
    "position_applied_for",
    "last_name",
    "first_name",
    "permanent_address",
    "gender",
    "civil_status",
    "birthdate",
    "age",
    "highest_education_level",
    "last_school_attended",
    "contact_number",
    "email_address",
    "preferred_work_location",
)

SORTABLE_FIELDS = ("created_at", "last_name", "status")
SORT_DIRECTIONS = ("asc", "desc")
PAGE_SIZE = 20


# ==================== 基础字段定义 ====================

class ApplicantBase(SQLModelBase):
    """应聘者基础字段 - 用于创建和继承"""
    position_applied_for: str = Field(..., min_length=1, max_length=255, index=True, description="应聘岗位")

    # 个人信息
    last_name: str = Field(..., min_length=1, max_length=255, index=True, description="姓")
    first_name: str = Field(..., min_length=1, max_length=255, description="名")
    middle_name: Optional[str] = Field(None, max_length=255, description="中间名")
    permanent_address: str = Field(
        ..., min_length=1, max_length=2000, sa_column=Column(Text, nullable=False), description="常住地址"
    )
    gender: str = Field(..., min_length=1, max_length=50, description="性别")
    civil_status: str = Field(..., min_length=1, max_length=50, description="婚姻状况")
    birthdate: date = Field(..., description="出生日期")
    age: int = Field(..., ge=0, le=120, description="年龄")

    # 教育背景
    highest_education_level: str = Field(..., min_length=1, max_length=50, description="最高学历")
    bachelors_degree_course: Optional[str] = Field(None, max_length=255, description="本科专业")
    year_graduated: Optional[int] = Field(None, ge=1900, le=2100, description="毕业年份")
    last_school_attended: str = Field(..., min_length=1, max_length=255, description="最后就读学校")
    prc_license: Optional[str] = Field(None, max_length=255, description="执业资格证")

    # 工作信息
    total_work_experience_years: Optional[float] = Field(None, ge=0, le=60, description="工作年限")
    expected_salary: Optional[float] = Field(None, ge=0, description="期望薪资")
    preferred_work_location: str = Field(..., min_length=1, max_length=255, description="期望工作地点")
    vacancy_source: Optional[str] = Field(None, max_length=255, description="职位信息来源")

    # 联系方式
    contact_number: str = Field(..., min_length=1, max_length=32, description="联系电话")
    email_address: EmailStr = Field(..., sa_type=String(255), description="电子邮箱")


# ==================== 表模型 ====================

class Applicant(ApplicantBase, TimestampMixin, IDMixin, table=True):
    """应聘者表模型"""
    __tablename__ = "applicants"

    status: str = Field(
        default=ApplicantStatus.SUBMITTED.value,
        max_length=32,
        index=True,
        description="应聘状态"
    )
    cv_path: Optional[str] = Field(None, max_length=255, description="简历文件存储 key")

    def __repr__(self) -> str:
        return f"<Applicant(id={self.id}, status={self.status})>"


# ==================== 请求 Schema ====================

class ApplicantCreate(ApplicantBase):
    """
    创建应聘者请求

    状态由服务端强制为 submitted，客户端提交 status 直接判为校验失败
    """
    status: Optional[Any] = None

    @field_validator("status", mode="before")
    @classmethod
    def prohibit_status(cls, v):
        if v is not None and v != "":
            raise ValueError("创建时不允许提交 status 字段")
        return None


class ApplicantUpdate(SQLModelBase):
    """更新应聘者请求 - 所有字段可选，但提供的字段仍需满足约束"""
    position_applied_for: Optional[str] = Field(None, min_length=1, max_length=255)
    last_name: Optional[str] = Field(None, min_length=1, max_length=255)
    first_name: Optional[str] = Field(None, min_length=1, max_length=255)
    middle_name: Optional[str] = Field(None, max_length=255)
    permanent_address: Optional[str] = Field(None, min_length=1, max_length=2000)
    gender: Optional[str] = Field(None, min_length=1, max_length=50)
    civil_status: Optional[str] = Field(None, min_length=1, max_length=50)
    birthdate: Optional[date] = None
    age: Optional[int] = Field(None, ge=0, le=120)
    highest_education_level: Optional[str] = Field(None, min_length=1, max_length=50)
    bachelors_degree_course: Optional[str] = Field(None, max_length=255)
    year_graduated: Optional[int] = Field(None, ge=1900, le=2100)
    last_school_attended: Optional[str] = Field(None, min_length=1, max_length=255)
    prc_license: Optional[str] = Field(None, max_length=255)
    total_work_experience_years: Optional[float] = Field(None, ge=0, le=60)
    expected_salary: Optional[float] = Field(None, ge=0)
    preferred_work_location: Optional[str] = Field(None, min_length=1, max_length=255)
    vacancy_source: Optional[str] = Field(None, max_length=255)
    contact_number: Optional[str] = Field(None, min_length=1, max_length=32)
    email_address: Optional[EmailStr] = None
    status: Optional[ApplicantStatus] = None

    @field_validator(*REQUIRED_FIELDS, "status", mode="before")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("该字段不能为空")
        return v


# ==================== 列表查询参数 ====================

class ApplicantFilter(SQLModelBase):
    """
    应聘者列表查询参数

    各条件之间为 AND；search 在 名/姓/邮箱/应聘岗位 四个字段上做不区分大小写的模糊匹配（OR）。
    sort / direction 非法时静默回退为 created_at / desc。
    status 按字面值精确匹配，不在枚举内的值只会得到空结果。
    """
    search: Optional[str] = None
    status: Optional[str] = None
    position: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    sort: str = "created_at"
    direction: str = "desc"
    page: int = Field(1, ge=1)

    @field_validator("search", "status", "position", "start_date", "end_date", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("sort", mode="before")
    @classmethod
    def fallback_sort(cls, v):
        return v if v in SORTABLE_FIELDS else "created_at"

    @field_validator("direction", mode="before")
    @classmethod
    def fallback_direction(cls, v):
        return v if v in SORT_DIRECTIONS else "desc"


# ==================== 响应 Schema ====================

class ApplicantResponse(TimestampResponse):
    """应聘者详情响应"""
    position_applied_for: str
    last_name: str
    first_name: str
    middle_name: Optional[str]
    permanent_address: str
    gender: str
    civil_status: str
    birthdate: date
    age: int
    highest_education_level: str
    bachelors_degree_course: Optional[str]
    year_graduated: Optional[int]
    last_school_attended: str
    prc_license: Optional[str]
    total_work_experience_years: Optional[float]
    expected_salary: Optional[float]
    preferred_work_location: str
    vacancy_source: Optional[str]
    contact_number: str
    email_address: str
    cv_path: Optional[str]
    status: str


class StatusCount(SQLModelBase):
    """按状态统计"""
    status: str
    total: int


class PositionCount(SQLModelBase):
    """按应聘岗位统计"""
    position_applied_for: str
    total: int


class DashboardOverview(SQLModelBase):
    """报表概览"""
    total_applicants: int
    recent_count: int
    by_status: list[StatusCount]
    by_position: list[PositionCount]
