"""
应用配置模块

使用 pydantic-settings 管理环境变量和应用配置
"""
from functools import lru_cache
from pathlib import Path
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
import json


# 项目根目录
BASE_DIR = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    """应用配置类"""

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # 应用基础配置
    app_name: str = "ATS-API"
    app_env: str = "development"
    debug: bool = True

    # 数据库配置
    database_url: str = f"sqlite+aiosqlite:///{BASE_DIR / 'data' / 'ats.db'}"

    # CORS 配置
    cors_origins: List[str] = ["*"]

    # 简历文件存储
    storage_dir: str = str(BASE_DIR / "data" / "storage")
    cv_max_size_kb: int = 5120
    cv_allowed_extensions: List[str] = [".pdf", ".doc", ".docx"]

    # 邮件配置 (smtp_host 为空时只记录日志，不真正发送)
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_use_tls: bool = True
    mail_from: str = "no-reply@example.com"
    mail_from_name: str = "Recruitment"

    # 认证配置
    frontend_url: str = "http://localhost:5173"
    password_reset_expire_minutes: int = 60
    staff_roles: List[str] = ["admin", "recruiter"]

    @field_validator("cors_origins", "staff_roles", "cv_allowed_extensions", mode="before")
    @classmethod
    def parse_list(cls, v):
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @field_validator("database_url", "storage_dir", mode="before")
    @classmethod
    def fix_data_path(cls, v):
        if isinstance(v, str) and "./data/" in v:
            return v.replace("./data/", str(BASE_DIR / "data") + "/")
        return v

    @property
    def cv_max_size_bytes(self) -> int:
        return self.cv_max_size_kb * 1024


@lru_cache
def get_settings() -> Settings:
    """获取配置单例"""
    return Settings()


# 全局配置实例
settings = get_settings()
