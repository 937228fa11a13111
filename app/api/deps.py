"""
API 依赖模块

认证上下文、服务实例和请求体解析
"""
import json
from typing import Any, Dict, Optional, Tuple

from fastapi import Depends, Header, Request
from loguru import logger
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import (
    BadRequestException,
    ForbiddenException,
    UnauthorizedException,
    ValidationException,
)
from app.core.security import parse_authorization_header
from app.core.storage import LocalStorage, get_storage
from app.crud import AuthContext, user_crud
from app.services.applicant_service import CV_FIELD, ApplicantService
from app.services.events import EventBus
from app.services.mailer import Mailer, get_mailer
from app.services.notifications import NotificationDispatcher


# ==================== 认证 ====================

async def get_auth_context(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
) -> AuthContext:
    """
    从 Authorization: Bearer <token> 解析当前用户

    使用方式:
        @router.get("/endpoint")
        async def endpoint(auth: AuthContext = Depends(get_auth_context)):
            ...
    """
    raw_token = parse_authorization_header(authorization)
    if raw_token is None:
        raise UnauthorizedException("未提供认证令牌")

    auth = await user_crud.resolve_token(db, raw_token)
    if auth is None:
        raise UnauthorizedException("认证令牌无效或已失效")
    if not auth.user.is_active:
        raise ForbiddenException("账号已停用")
    return auth


async def require_staff(auth: AuthContext = Depends(get_auth_context)) -> AuthContext:
    """仅允许招聘人员（admin / recruiter）访问"""
    if not auth.has_role(settings.staff_roles):
        logger.warning(f"非招聘人员访问被拒绝: {auth.user.email} ({auth.user.role})")
        raise ForbiddenException("仅招聘人员可以访问")
    return auth


# ==================== 服务 ====================

def get_event_bus(
    db: AsyncSession = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
) -> EventBus:
    """事件总线（已注册邮件通知）"""
    return NotificationDispatcher(db, mailer).register(EventBus())


def get_applicant_service(
    db: AsyncSession = Depends(get_db),
    storage: LocalStorage = Depends(get_storage),
    events: EventBus = Depends(get_event_bus),
) -> ApplicantService:
    return ApplicantService(db, storage, events)


# ==================== 请求体 ====================

def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


async def read_payload(request: Request) -> Tuple[Dict[str, Any], Optional[UploadFile]]:
    """
    读取 JSON 或表单请求体

    表单中的 upload_cv 文件单独返回；空字符串统一视为 None
    """
    content_type = request.headers.get("content-type", "")

    if content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        form = await request.form()
        payload: Dict[str, Any] = {}
        cv = None
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                if key == CV_FIELD and value.filename:
                    cv = value
                continue
            payload[key] = _blank_to_none(value)
        return payload, cv

    body = await request.body()
    if not body:
        return {}, None
    try:
        data = json.loads(body)
    except json.JSONDecodeError:
        raise BadRequestException("请求体不是合法的 JSON")
    if not isinstance(data, dict):
        raise BadRequestException("请求体必须是 JSON 对象")
    return {key: _blank_to_none(value) for key, value in data.items()}, None


def validate_schema(schema, data: Dict[str, Any]):
    """用指定 Schema 校验数据，失败时返回字段级错误"""
    try:
        return schema.model_validate(data)
    except ValidationError as exc:
        raise ValidationException.from_pydantic(exc)
