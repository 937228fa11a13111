"""
用户与令牌 CRUD 操作
"""
from dataclasses import dataclass
from datetime import timedelta
from typing import List, Optional
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core import security
from app.models.base import as_utc, utc_now
from app.models.user import PasswordResetToken, PersonalAccessToken, User, UserCreate
from .base import CRUDBase


@dataclass
class AuthContext:
    """已认证的请求上下文"""
    user: User
    token: PersonalAccessToken

    def has_role(self, roles: List[str]) -> bool:
        return self.user.role in roles


class CRUDUser(CRUDBase[User]):
    """用户 CRUD 操作类"""

    async def get_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        """根据邮箱查找用户（不区分大小写）"""
        result = await db.execute(
            select(self.model).where(self.model.email == email.lower())
        )
        return result.scalar_one_or_none()

    async def get_by_roles(self, db: AsyncSession, roles: List[str]) -> List[User]:
        """获取指定角色的启用用户"""
        result = await db.execute(
            select(self.model)
            .where(self.model.role.in_(roles), self.model.is_active == True)  # noqa: E712
            .order_by(self.model.created_at.asc())
        )
        return list(result.scalars().all())

    async def create_user(self, db: AsyncSession, *, obj_in: UserCreate) -> User:
        """创建用户（密码以 bcrypt 哈希保存）"""
        return await self.create(db, obj_in={
            "name": obj_in.name,
            "email": obj_in.email.lower(),
            "password": security.hash_password(obj_in.password),
            "role": obj_in.role,
        })

    async def authenticate(self, db: AsyncSession, email: str, password: str) -> Optional[User]:
        """校验邮箱和密码，失败返回 None"""
        user = await self.get_by_email(db, email)
        if not user or not security.verify_password(password, user.password):
            return None
        return user

    async def set_password(self, db: AsyncSession, *, user: User, password: str) -> User:
        return await self.update(db, db_obj=user, obj_in={
            "password": security.hash_password(password),
        })

    # ==================== 访问令牌 ====================

    async def issue_token(self, db: AsyncSession, *, user: User, name: str = "api") -> str:
        """签发访问令牌，返回令牌明文（只返回这一次）"""
        secret = security.generate_secret()
        token = PersonalAccessToken(
            user_id=user.id,
            name=name[:255],
            token_hash=security.hash_token(secret),
        )
        db.add(token)
        await db.flush()
        return security.format_access_token(token.id, secret)

    async def resolve_token(self, db: AsyncSession, raw_token: Optional[str]) -> Optional[AuthContext]:
        """
        将令牌明文解析为认证上下文

        令牌格式错误、不存在、已吊销或不匹配时返回 None
        """
        parsed = security.parse_access_token(raw_token)
        if parsed is None:
            return None
        token_id, secret = parsed

        token = await db.get(PersonalAccessToken, token_id)
        if token is None or not security.tokens_match(secret, token.token_hash):
            return None

        user = await self.get(db, token.user_id)
        if user is None:
            return None

        token.last_used_at = utc_now()
        await db.flush()
        return AuthContext(user=user, token=token)

    async def revoke_token(self, db: AsyncSession, *, token: PersonalAccessToken) -> None:
        """吊销单个令牌"""
        await db.delete(token)
        await db.flush()

    async def revoke_all_tokens(self, db: AsyncSession, *, user: User) -> None:
        """吊销用户的全部令牌"""
        await db.execute(
            delete(PersonalAccessToken).where(PersonalAccessToken.user_id == user.id)
        )
        await db.flush()

    # ==================== 密码重置令牌 ====================

    async def create_reset_token(self, db: AsyncSession, *, email: str) -> str:
        """生成密码重置令牌（覆盖该邮箱之前的令牌），返回明文"""
        email = email.lower()
        await db.execute(
            delete(PasswordResetToken).where(PasswordResetToken.email == email)
        )
        secret = security.generate_secret(32)
        db.add(PasswordResetToken(email=email, token_hash=security.hash_token(secret)))
        await db.flush()
        return secret

    async def consume_reset_token(
        self,
        db: AsyncSession,
        *,
        email: str,
        secret: str,
        expire_minutes: int
    ) -> bool:
        """
        校验并消费密码重置令牌

        令牌匹配且未过期时删除并返回 True
        """
        email = email.lower()
        result = await db.execute(
            select(PasswordResetToken).where(PasswordResetToken.email == email)
        )
        record = result.scalar_one_or_none()
        if record is None or not security.tokens_match(secret, record.token_hash):
            return False

        # 过期令牌原样保留，下次申请重置时由 create_reset_token 覆盖
        if as_utc(record.created_at) + timedelta(minutes=expire_minutes) < utc_now():
            return False

        await db.delete(record)
        await db.flush()
        return True


user_crud = CRUDUser(User)
