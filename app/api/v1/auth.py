"""
认证 API 路由

登录 / 退出 / 当前用户 / 忘记密码 / 重置密码
"""
from fastapi import APIRouter, Depends, Request
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_auth_context
from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import (
    ForbiddenException,
    UnauthorizedException,
    ValidationException,
)
from app.core.response import success_response, ResponseModel, MessageResponse
from app.crud import AuthContext, user_crud
from app.models.user import (
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    ResetPasswordRequest,
    UserResponse,
)
from app.services.mailer import Mailer, get_mailer
from app.services.notifications import password_reset_message

router = APIRouter()


@router.post("/login", summary="登录", response_model=ResponseModel[LoginResponse])
async def login(
    data: LoginRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """
    邮箱密码登录，返回访问令牌（格式 <id>|<secret>）
    """
    user = await user_crud.authenticate(db, data.email, data.password)
    if user is None:
        raise UnauthorizedException("邮箱或密码错误")
    if not user.is_active:
        raise ForbiddenException("账号已停用")

    token_name = request.headers.get("user-agent") or "api"
    token = await user_crud.issue_token(db, user=user, name=token_name)
    logger.info(f"用户登录: {user.email}")

    return success_response(
        data=LoginResponse(
            token=token,
            user=UserResponse.model_validate(user),
        ).model_dump(),
        message="登录成功"
    )


@router.get("/me", summary="获取当前用户", response_model=ResponseModel[UserResponse])
async def get_me(auth: AuthContext = Depends(get_auth_context)):
    return success_response(data=UserResponse.model_validate(auth.user).model_dump())


@router.post("/logout", summary="退出登录", response_model=MessageResponse)
async def logout(
    auth: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """
    吊销当前使用的令牌
    """
    await user_crud.revoke_token(db, token=auth.token)
    logger.info(f"用户退出登录: {auth.user.email}")
    return success_response(message="已退出登录")


@router.post("/forgot-password", summary="发送重置密码邮件", response_model=MessageResponse)
async def forgot_password(
    data: ForgotPasswordRequest,
    db: AsyncSession = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    """
    生成重置令牌并发送重置链接（链接有效期见 password_reset_expire_minutes）
    """
    user = await user_crud.get_by_email(db, data.email)
    if user is None:
        raise ValidationException.for_field("email", "找不到该邮箱对应的用户")

    secret = await user_crud.create_reset_token(db, email=user.email)
    await db.commit()

    try:
        await mailer.send(password_reset_message(user.email, secret))
    except Exception:
        logger.exception(f"重置密码邮件发送失败: {user.email}")

    return success_response(message="重置密码链接已发送")


@router.post("/reset-password", summary="重置密码", response_model=MessageResponse)
async def reset_password(
    data: ResetPasswordRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    校验重置令牌后设置新密码，并吊销该用户的全部访问令牌
    """
    user = await user_crud.get_by_email(db, data.email)
    if user is None:
        raise ValidationException.for_field("email", "找不到该邮箱对应的用户")

    consumed = await user_crud.consume_reset_token(
        db,
        email=user.email,
        secret=data.token,
        expire_minutes=settings.password_reset_expire_minutes,
    )
    if not consumed:
        raise ValidationException.for_field("token", "重置令牌无效或已过期")

    await user_crud.set_password(db, user=user, password=data.password)
    await user_crud.revoke_all_tokens(db, user=user)
    logger.info(f"用户已重置密码: {user.email}")
    return success_response(message="密码已重置")
