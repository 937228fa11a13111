"""
FastAPI 主应用入口

应聘者管理系统（ATS）后端：公开投递、应聘者检索与状态流转、岗位管理和数据看板
"""
from contextlib import asynccontextmanager
from pathlib import Path
from fastapi import FastAPI
from fastapi.routing import APIRoute
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from app.core.config import settings
from app.core.database import init_db, close_db
from app.core.exceptions import register_exception_handlers
from app.core.response import success_response, DictResponse
from app.api import api_router

APP_VERSION = "1.0.0"


def custom_generate_unique_id(route: APIRoute) -> str:
    """使用路由函数名作为 OpenAPI operationId"""
    return route.name


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    应用生命周期管理

    启动时建表并准备简历存储目录，关闭时释放连接池
    """
    logger.info(f"启动应用: {settings.app_name} (env={settings.app_env}, debug={settings.debug})")

    await init_db()
    Path(settings.storage_dir).mkdir(parents=True, exist_ok=True)
    logger.info(f"数据库已就绪，简历存储目录: {settings.storage_dir}")

    yield

    await close_db()
    logger.info("应用已关闭")


def add_cors(app: FastAPI) -> None:
    """
    配置 CORS

    允许任意来源时不能同时携带凭据
    """
    allow_all = "*" in settings.cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_origins,
        allow_credentials=not allow_all,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def create_app() -> FastAPI:
    """
    创建 FastAPI 应用实例

    测试中每个用例各自创建，便于覆盖依赖
    """
    app = FastAPI(
        title=settings.app_name,
        description="应聘者管理系统 API",
        version=APP_VERSION,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
        generate_unique_id_function=custom_generate_unique_id,
    )

    register_exception_handlers(app)
    app.include_router(api_router, prefix="/api/v1")

    @app.get("/health", tags=["系统"], response_model=DictResponse)
    async def health_check():
        return success_response(data={"status": "healthy"})

    @app.get("/", tags=["系统"], response_model=DictResponse)
    async def root():
        return success_response(data={
            "name": settings.app_name,
            "version": APP_VERSION,
            "docs": "/docs" if settings.debug else None,
        })

    # 最后添加的中间件最先执行
    add_cors(app)
    return app


app = create_app()
