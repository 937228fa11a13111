"""
后台账号创建脚本

用法：
    python scripts/create_user.py --name "Alice" --email alice@example.com --password secret123
    python scripts/create_user.py --email bob@example.com --password secret123 --role admin
"""
import argparse
import asyncio
import sys
from pathlib import Path

from pydantic import ValidationError

# 确保项目根目录在 Python 路径中
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.core.database import AsyncSessionLocal, close_db, init_db  # noqa: E402
from app.crud import user_crud  # noqa: E402
from app.models.user import UserCreate, UserRole  # noqa: E402


def parse_args():
    parser = argparse.ArgumentParser(description="创建后台账号")
    parser.add_argument("--name", default="Administrator", help="姓名")
    parser.add_argument("--email", required=True, help="登录邮箱")
    parser.add_argument("--password", required=True, help="密码（至少 8 位）")
    parser.add_argument(
        "--role",
        default=UserRole.RECRUITER,
        choices=[UserRole.ADMIN, UserRole.RECRUITER, UserRole.VIEWER],
        help="角色 (默认: recruiter)"
    )
    return parser.parse_args()


async def create_user(args) -> bool:
    """创建账号，邮箱已存在时返回 False"""
    try:
        data = UserCreate(name=args.name, email=args.email, password=args.password, role=args.role)
    except ValidationError as e:
        print(f"参数错误:\n{e}")
        return False

    await init_db()
    try:
        async with AsyncSessionLocal() as db:
            if await user_crud.get_by_email(db, data.email):
                print(f"错误：邮箱已存在: {data.email}")
                return False
            user = await user_crud.create_user(db, obj_in=data)
            await db.commit()
            print(f"账号已创建: {user.email} ({user.role}) id={user.id}")
            return True
    finally:
        await close_db()


if __name__ == "__main__":
    ok = asyncio.run(create_user(parse_args()))
    sys.exit(0 if ok else 1)
