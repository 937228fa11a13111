"""
应聘者生命周期服务

负责创建 / 更新 / 删除应聘者，并管理简历文件：
- 创建时状态强制为 submitted，客户端提交 status 视为校验失败
- 更新时替换简历，提交成功后才删除旧文件（尽力而为，失败只记录日志）
- 删除时先删除简历文件和备注，再删除记录
- 数据提交后才发出事件，事件处理失败不影响本次操作
"""
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import UploadFile
from loguru import logger
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings, settings as default_settings
from app.core.exceptions import NotFoundException, ValidationException
from app.core.storage import LocalStorage
from app.crud import applicant_crud
from app.models.applicant import (
    Applicant,
    ApplicantCreate,
    ApplicantResponse,
    ApplicantStatus,
    ApplicantUpdate,
)
from .events import ApplicantStatusChanged, ApplicantSubmitted, EventBus

CV_FIELD = "upload_cv"
CV_DIRECTORY = "cvs"


class ApplicantService:
    """应聘者生命周期服务"""

    def __init__(
        self,
        db: AsyncSession,
        storage: LocalStorage,
        events: EventBus,
        config: Settings = None,
    ):
        self.db = db
        self.storage = storage
        self.events = events
        self.config = config or default_settings

    # ==================== 校验 ====================

    def _validate(self, schema, payload: Dict[str, Any], cv: Optional[UploadFile]):
        """
        校验字段和简历文件，所有错误一次性返回

        返回 (校验后的数据, 简历扩展名)
        """
        errors: List[Dict[str, Any]] = []
        data = None
        try:
            data = schema.model_validate(payload)
        except ValidationError as exc:
            errors.extend(exc.errors(include_url=False))

        extension = None
        if cv is not None:
            try:
                extension = self.storage.validate_upload(
                    cv,
                    field=CV_FIELD,
                    allowed_extensions=self.config.cv_allowed_extensions,
                    max_size=self.config.cv_max_size_bytes,
                )
            except ValidationException as exc:
                errors.extend(exc.data["errors"])

        if errors:
            raise ValidationException(errors)
        return data, extension

    async def _store_cv(self, cv: UploadFile, extension: str) -> str:
        return await self.storage.put(
            cv,
            directory=CV_DIRECTORY,
            extension=extension,
            max_size=self.config.cv_max_size_bytes,
            field=CV_FIELD,
        )

    def _discard_cv(self, key: str) -> None:
        """删除简历文件，失败只记录日志"""
        try:
            self.storage.delete(key)
        except (OSError, ValueError) as exc:
            logger.warning(f"删除简历文件失败: {key} | {exc}")

    # ==================== 生命周期操作 ====================

    async def create(
        self,
        payload: Dict[str, Any],
        cv: Optional[UploadFile] = None,
        *,
        notify: bool = False
    ) -> Applicant:
        """
        创建应聘者

        notify=True 为公开表单提交，会发出 ApplicantSubmitted 事件；
        后台人员代为录入时不发通知
        """
        data, extension = self._validate(ApplicantCreate, payload, cv)

        values = data.model_dump(exclude={"status"})
        values["status"] = ApplicantStatus.SUBMITTED.value
        if cv is not None:
            values["cv_path"] = await self._store_cv(cv, extension)

        try:
            applicant = await applicant_crud.create_applicant(self.db, data=values)
            await self.db.commit()
        except Exception:
            if values.get("cv_path"):
                self._discard_cv(values["cv_path"])
            raise

        logger.info(f"新应聘者: {applicant.id} ({applicant.position_applied_for})")

        if notify:
            await self.events.emit(
                ApplicantSubmitted(applicant=ApplicantResponse.model_validate(applicant))
            )
        return applicant

    async def update(
        self,
        applicant: Applicant,
        payload: Dict[str, Any],
        cv: Optional[UploadFile] = None
    ) -> Applicant:
        """
        部分更新应聘者

        状态发生变化且有邮箱时，提交后发出 ApplicantStatusChanged 事件
        """
        previous_status = applicant.status
        data, extension = self._validate(ApplicantUpdate, payload, cv)

        values = data.model_dump(exclude_unset=True)
        if "status" in values:
            values["status"] = ApplicantStatus(values["status"]).value

        previous_cv = applicant.cv_path
        if cv is not None:
            values["cv_path"] = await self._store_cv(cv, extension)

        # 保存失败时删除新文件，旧文件和记录保持不变
        try:
            applicant = await applicant_crud.update_applicant(self.db, db_obj=applicant, data=values)
            await self.db.commit()
        except Exception:
            if cv is not None:
                self._discard_cv(values["cv_path"])
            raise

        if cv is not None and previous_cv:
            self._discard_cv(previous_cv)

        if previous_status != applicant.status:
            logger.info(f"应聘者状态变更: {applicant.id} {previous_status} -> {applicant.status}")
            if applicant.email_address:
                await self.events.emit(ApplicantStatusChanged(
                    applicant=ApplicantResponse.model_validate(applicant),
                    previous_status=previous_status,
                    new_status=applicant.status,
                ))
        return applicant

    async def delete(self, applicant: Applicant) -> None:
        """删除应聘者（简历文件、备注一并删除）"""
        applicant_id = applicant.id
        if applicant.cv_path:
            self._discard_cv(applicant.cv_path)

        await applicant_crud.delete_applicant(self.db, db_obj=applicant)
        await self.db.commit()
        logger.info(f"应聘者已删除: {applicant_id}")

    def cv_file(self, applicant: Applicant) -> Path:
        """获取应聘者简历文件路径"""
        if not applicant.cv_path:
            raise NotFoundException(f"应聘者没有上传简历: {applicant.id}")
        path = self.storage.path(applicant.cv_path)
        if path is None:
            raise NotFoundException(f"简历文件不存在: {applicant.id}")
        return path
