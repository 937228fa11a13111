"""
异常处理模块

定义业务异常和全局异常处理器
"""
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from loguru import logger
from pydantic import ValidationError

from .response import error_response


class AppException(Exception):
    """应用基础异常"""

    def __init__(
        self,
        message: str = "服务器内部错误",
        code: int = 500,
        data: dict = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.message = message
        self.code = code
        self.data = data
        self.headers = headers
        super().__init__(self.message)


class NotFoundException(AppException):
    """资源不存在异常"""

    def __init__(self, message: str = "资源不存在"):
        super().__init__(message=message, code=404)


class BadRequestException(AppException):
    """请求参数错误异常"""

    def __init__(self, message: str = "请求参数错误"):
        super().__init__(message=message, code=400)


class UnauthorizedException(AppException):
    """未认证异常"""

    def __init__(self, message: str = "未认证"):
        super().__init__(
            message=message,
            code=401,
            headers={"WWW-Authenticate": "Bearer"},
        )


class ForbiddenException(AppException):
    """权限不足异常"""

    def __init__(self, message: str = "权限不足"):
        super().__init__(message=message, code=403)


def format_validation_errors(errors: List[Dict[str, Any]]) -> dict:
    """
    将 pydantic 错误列表整理为可 JSON 序列化的结构

    返回:
        {
            "errors": [{"loc": [...], "msg": "...", "type": "..."}],
            "fields": {"first_name": ["Field required"]}
        }
    """
    items = []
    fields: Dict[str, List[str]] = {}
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        msg = str(error.get("msg", ""))
        items.append({"loc": loc, "msg": msg, "type": error.get("type", "")})

        # 去掉 body/query 等位置前缀，只保留字段名
        names = [part for part in loc if part not in ("body", "query", "path", "form")]
        field = names[-1] if names else "_"
        fields.setdefault(field, []).append(msg)
    return {"errors": items, "fields": fields}


class ValidationException(AppException):
    """请求数据校验失败异常（字段级错误）"""

    def __init__(self, errors: List[Dict[str, Any]], message: str = "请求参数验证失败"):
        super().__init__(message=message, code=422, data=format_validation_errors(errors))

    @classmethod
    def from_pydantic(cls, exc: ValidationError) -> "ValidationException":
        return cls(exc.errors(include_url=False))

    @classmethod
    def for_field(cls, field: str, msg: str, type_: str = "value_error") -> "ValidationException":
        return cls([{"loc": (field,), "msg": msg, "type": type_}])


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """应用异常处理器"""
    logger.warning(f"AppException: {exc.message} | Path: {request.url.path}")
    return JSONResponse(
        status_code=exc.code,
        content=error_response(message=exc.message, code=exc.code, data=exc.data),
        headers=exc.headers,
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """HTTP 异常处理器"""
    logger.warning(f"HTTPException: {exc.detail} | Path: {request.url.path}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(message=str(exc.detail), code=exc.status_code),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """请求验证异常处理器"""
    data = format_validation_errors(exc.errors())
    message = "; ".join(
        f"{' -> '.join(e['loc'])}: {e['msg']}" for e in data["errors"]
    )
    logger.warning(f"ValidationError: {message} | Path: {request.url.path}")

    return JSONResponse(
        status_code=422,
        content=error_response(
            message="请求参数验证失败",
            code=422,
            data=data
        )
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """通用异常处理器"""
    logger.exception(f"Unhandled Exception: {exc} | Path: {request.url.path}")
    return JSONResponse(
        status_code=500,
        content=error_response(message="服务器内部错误", code=500)
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    注册全局异常处理器

    所有错误统一返回 {success: false, code, message, data} 结构
    """
    # ValidationException 是 AppException 的子类，由同一个处理器输出字段错误
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
