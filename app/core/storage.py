"""
文件存储模块

简历文件按 key 存储在本地磁盘目录下，只暴露 按 key 写入 / 读取 / 删除 三种操作
"""
import uuid
from pathlib import Path
from typing import Iterable, Optional

from fastapi import UploadFile
from loguru import logger

from .config import settings
from .exceptions import ValidationException

CHUNK_SIZE = 64 * 1024


class LocalStorage:
    """
    本地磁盘存储

    key 为相对路径（例如 cvs/3f2a...e1.pdf），不能逃出根目录
    """

    def __init__(self, root: str | Path):
        self.root = Path(root).resolve()

    def _resolve(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root != path and self.root not in path.parents:
            raise ValueError(f"非法的存储路径: {key}")
        return path

    def validate_upload(
        self,
        file: UploadFile,
        *,
        field: str,
        allowed_extensions: Iterable[str],
        max_size: int,
    ) -> str:
        """
        校验上传文件的类型和大小，返回小写扩展名

        文件大小未知时（无 Content-Length）在写入过程中再次检查
        """
        if not file.filename:
            raise ValidationException.for_field(field, "未提供文件名")

        extension = Path(file.filename).suffix.lower()
        allowed = [ext.lower() for ext in allowed_extensions]
        if extension not in allowed:
            raise ValidationException.for_field(
                field, f"文件类型必须为: {', '.join(ext.lstrip('.') for ext in allowed)}"
            )

        if file.size is not None and file.size > max_size:
            raise ValidationException.for_field(
                field, f"文件不能超过 {max_size // 1024} KB"
            )
        return extension

    async def put(
        self,
        file: UploadFile,
        *,
        directory: str,
        extension: str,
        max_size: int,
        field: str = "file",
    ) -> str:
        """流式写入上传文件，返回生成的存储 key"""
        key = f"{directory}/{uuid.uuid4().hex}{extension}"
        path = self._resolve(key)
        path.parent.mkdir(parents=True, exist_ok=True)

        written = 0
        try:
            with path.open("wb") as buffer:
                while chunk := await file.read(CHUNK_SIZE):
                    written += len(chunk)
                    if written > max_size:
                        raise ValidationException.for_field(
                            field, f"文件不能超过 {max_size // 1024} KB"
                        )
                    buffer.write(chunk)
        except Exception:
            path.unlink(missing_ok=True)
            raise

        logger.info(f"文件已保存: {key} ({written} bytes)")
        return key

    def path(self, key: str) -> Optional[Path]:
        """按 key 获取文件路径，文件不存在时返回 None"""
        try:
            path = self._resolve(key)
        except ValueError:
            return None
        return path if path.is_file() else None

    def exists(self, key: str) -> bool:
        return self.path(key) is not None

    def delete(self, key: str) -> bool:
        """
        按 key 删除文件

        文件不存在返回 False，其他 IO 错误向上抛出
        """
        path = self._resolve(key)
        if not path.exists():
            return False
        path.unlink()
        logger.info(f"文件已删除: {key}")
        return True


def get_storage() -> LocalStorage:
    """存储依赖注入（测试中可覆盖）"""
    return LocalStorage(settings.storage_dir)
