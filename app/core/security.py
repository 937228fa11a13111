"""
安全工具模块

密码哈希（bcrypt）和访问令牌的生成 / 解析。
令牌格式为 "<token_id>|<secret>"，数据库只保存 secret 的 SHA-256。
"""
import hashlib
import hmac
import secrets
from typing import Optional, Tuple

import bcrypt


def hash_password(password: str) -> str:
    """使用 bcrypt 哈希密码"""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """校验密码"""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # 哈希格式非法
        return False


def generate_secret(nbytes: int = 40) -> str:
    """生成随机令牌明文"""
    return secrets.token_urlsafe(nbytes)


def hash_token(secret: str) -> str:
    """令牌明文的 SHA-256"""
    return hashlib.sha256(secret.encode("utf-8")).hexdigest()


def tokens_match(secret: str, token_hash: str) -> bool:
    return hmac.compare_digest(hash_token(secret), token_hash)


def format_access_token(token_id: str, secret: str) -> str:
    return f"{token_id}|{secret}"


def parse_access_token(raw: Optional[str]) -> Optional[Tuple[str, str]]:
    """
    解析令牌明文

    返回 (token_id, secret)，格式不正确时返回 None
    """
    if not raw or "|" not in raw:
        return None
    token_id, _, secret = raw.partition("|")
    if not token_id or not secret:
        return None
    return token_id, secret


def parse_authorization_header(header: Optional[str]) -> Optional[str]:
    """从 Authorization 头中取出 Bearer 令牌"""
    if not header:
        return None
    scheme, _, credentials = header.partition(" ")
    if scheme.lower() != "bearer" or not credentials.strip():
        return None
    return credentials.strip()
