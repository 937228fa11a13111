"""
测试配置文件

提供测试用的 fixtures：独立的临时数据库、测试客户端、招聘人员令牌、邮件记录器、测试数据工厂等
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import AsyncGenerator, Dict, List, Optional

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlmodel import SQLModel

import app.models  # noqa: F401  注册全部表
from app.core.database import enable_sqlite_foreign_keys, get_db
from app.core.storage import LocalStorage, get_storage
from app.crud import user_crud
from app.main import create_app
from app.models.user import UserCreate, UserRole
from app.services.mailer import MailMessage, Mailer, get_mailer

STAFF_PASSWORD = "password123"


# ========== 邮件记录器 ==========

class RecordingMailer(Mailer):
    """记录所有待发送邮件，不真正发送"""

    def __init__(self):
        self.sent: List[MailMessage] = []

    async def send(self, message: MailMessage) -> None:
        self.sent.append(message)

    def subjects(self) -> List[str]:
        return [m.subject for m in self.sent]


# ========== 测试数据工厂 ==========

@dataclass
class DataFactory:
    """
    测试数据工厂类

    集中管理测试数据创建，避免各测试文件重复代码
    字段变更时只需修改此处
    """
    client: AsyncClient
    headers: Dict[str, str]
    _counter: int = field(default=0, repr=False)

    def _next_id(self) -> str:
        """生成唯一后缀，避免数据冲突"""
        self._counter += 1
        return str(self._counter)

    def applicant_payload(self, **overrides) -> dict:
        """一份完整有效的应聘者数据"""
        suffix = self._next_id()
        return {
            "position_applied_for": "Backend Engineer",
            "last_name": f"Santos{suffix}",
            "first_name": f"Maria{suffix}",
            "permanent_address": "123 Rizal Street, Quezon City",
            "gender": "Female",
            "civil_status": "Single",
            "birthdate": "1995-04-12",
            "age": 29,
            "highest_education_level": "Bachelor",
            "last_school_attended": "State University",
            "contact_number": f"0917{suffix.zfill(7)}",
            "email_address": f"applicant{suffix}@example.com",
            "preferred_work_location": "Manila",
            **overrides
        }

    async def submit_application(self, **overrides) -> dict:
        """通过公开入口投递，返回完整响应数据"""
        resp = await self.client.post(
            "/api/v1/public/applicants", json=self.applicant_payload(**overrides)
        )
        assert resp.status_code == 201, f"投递失败: {resp.text}"
        return resp.json()["data"]

    async def create_applicant(self, **overrides) -> dict:
        """招聘人员录入应聘者，返回完整响应数据"""
        resp = await self.client.post(
            "/api/v1/applicants", json=self.applicant_payload(**overrides), headers=self.headers
        )
        assert resp.status_code == 201, f"录入应聘者失败: {resp.text}"
        return resp.json()["data"]

    async def create_position(self, **overrides) -> dict:
        """创建岗位，返回完整响应数据"""
        suffix = self._next_id()
        data = {
            "title": f"测试岗位{suffix}",
            "description": "测试用岗位描述",
            "location": "Manila",
            "salary_min": 30000,
            "salary_max": 50000,
            **overrides
        }
        resp = await self.client.post("/api/v1/positions", json=data, headers=self.headers)
        assert resp.status_code == 201, f"创建岗位失败: {resp.text}"
        return resp.json()["data"]


# ========== 数据库 ==========

@pytest_asyncio.fixture(scope="function")
async def db_session(tmp_path: Path) -> AsyncGenerator[AsyncSession, None]:
    """
    为每个测试函数提供独立的数据库

    每个测试使用临时目录中的 SQLite 文件，并打开外键检查
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        echo=False,
    )
    enable_sqlite_foreign_keys(engine)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
def storage(tmp_path: Path) -> LocalStorage:
    return LocalStorage(tmp_path / "storage")


@pytest_asyncio.fixture(scope="function")
async def client(
    db_session: AsyncSession,
    mailer: RecordingMailer,
    storage: LocalStorage,
) -> AsyncGenerator[AsyncClient, None]:
    """
    提供测试用的 HTTP 客户端

    覆盖数据库、邮件和存储依赖
    """
    app = create_app()

    async def override_get_db():
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.dependency_overrides[get_storage] = lambda: storage

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


# ========== 用户与令牌 ==========

async def create_user(
    db: AsyncSession,
    email: str,
    role: str = UserRole.RECRUITER,
    name: Optional[str] = None,
):
    user = await user_crud.create_user(db, obj_in=UserCreate(
        name=name or email.split("@")[0],
        email=email,
        password=STAFF_PASSWORD,
        role=role,
    ))
    await db.commit()
    return user


async def token_headers(db: AsyncSession, user) -> Dict[str, str]:
    token = await user_crud.issue_token(db, user=user, name="pytest")
    await db.commit()
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def staff_user(db_session: AsyncSession):
    """招聘人员账号"""
    return await create_user(db_session, "recruiter@example.com", UserRole.RECRUITER, "Rita Recruiter")


@pytest_asyncio.fixture
async def staff_headers(db_session: AsyncSession, staff_user) -> Dict[str, str]:
    """招聘人员的认证请求头"""
    return await token_headers(db_session, staff_user)


@pytest_asyncio.fixture
async def viewer_headers(db_session: AsyncSession) -> Dict[str, str]:
    """非招聘人员（viewer）的认证请求头"""
    viewer = await create_user(db_session, "viewer@example.com", UserRole.VIEWER)
    return await token_headers(db_session, viewer)


@pytest_asyncio.fixture
async def factory(client: AsyncClient, staff_headers: Dict[str, str]) -> DataFactory:
    """提供测试数据工厂实例"""
    return DataFactory(client=client, headers=staff_headers)
