"""
API 路由模块
"""
from fastapi import APIRouter

from app.core.response import ERROR_RESPONSES
from .v1 import public, applicants, notes, positions, dashboard, auth

# 创建主路由（统一声明错误响应格式）
api_router = APIRouter(responses=ERROR_RESPONSES)

# 注册各模块路由
api_router.include_router(
    public.router,
    prefix="/public",
    tags=["公开投递"]
)
api_router.include_router(
    applicants.router,
    prefix="/applicants",
    tags=["应聘者管理"]
)
api_router.include_router(
    notes.router,
    prefix="/applicants",
    tags=["应聘者备注"]
)
api_router.include_router(
    positions.router,
    prefix="/positions",
    tags=["岗位管理"]
)
api_router.include_router(
    dashboard.router,
    prefix="/dashboard",
    tags=["数据看板"]
)
api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["认证"]
)
