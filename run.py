#!/usr/bin/env python
"""
ATS 后端启动脚本

用法:
    python run.py                    # 默认启动 (127.0.0.1:8000)
    python run.py -p 8080            # 指定端口
    python run.py --host 0.0.0.0     # 允许外网访问
    python run.py --reload           # 开启热重载
    python run.py --init-db          # 只建表，不启动服务
"""
import argparse
import asyncio
import shutil
import sys
from pathlib import Path

# 确保项目根目录在 Python 路径中
ROOT_DIR = Path(__file__).parent
sys.path.insert(0, str(ROOT_DIR))


def parse_args():
    parser = argparse.ArgumentParser(description="ATS 后端启动脚本")
    parser.add_argument("-p", "--port", type=int, default=8000, help="服务端口 (默认: 8000)")
    parser.add_argument("--host", default="127.0.0.1", help="服务地址 (默认: 127.0.0.1)")
    parser.add_argument("--reload", action="store_true", help="开启热重载 (开发模式)")
    parser.add_argument("--workers", type=int, default=1, help="工作进程数 (默认: 1)")
    parser.add_argument("--init-db", action="store_true", help="只创建数据表后退出")
    return parser.parse_args()


def prepare_env() -> None:
    """没有 .env 时从 .env.example 复制一份"""
    env_file = ROOT_DIR / ".env"
    env_example = ROOT_DIR / ".env.example"
    if env_file.exists():
        return
    if env_example.exists():
        shutil.copy(env_example, env_file)
        print("✅ 已从 .env.example 创建 .env，请按需修改 SMTP 等配置")
    else:
        print("⚠️  未找到 .env 文件，将使用默认配置")


async def create_tables() -> None:
    from app.core.database import init_db, close_db

    await init_db()
    await close_db()


def main():
    args = parse_args()
    prepare_env()

    if args.init_db:
        asyncio.run(create_tables())
        print("✅ 数据表已创建")
        return

    # .env 准备好之后再读取配置
    from app.core.config import settings

    print("=" * 50)
    print(f"  {settings.app_name} 应聘者管理系统后端")
    print("=" * 50)
    print(f"   地址: http://{args.host}:{args.port}")
    if settings.debug:
        print(f"   文档: http://{args.host}:{args.port}/docs")
    print(f"   数据库: {settings.database_url}")
    print(f"   邮件: {settings.smtp_host or '仅记录日志'}")
    print("   创建后台账号: python scripts/create_user.py --help")
    print("-" * 50)

    try:
        import uvicorn
    except ImportError:
        print("❌ 错误: 未安装 uvicorn，请运行: pip install 'uvicorn[standard]'")
        sys.exit(1)

    try:
        uvicorn.run(
            "app.main:app",
            host=args.host,
            port=args.port,
            reload=args.reload,
            workers=1 if args.reload else args.workers,
            log_level="info",
        )
    except KeyboardInterrupt:
        print("\n👋 服务已停止")


if __name__ == "__main__":
    main()
