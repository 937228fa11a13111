"""
应聘者备注 CRUD 操作
"""
from typing import List
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.note import ApplicantNote, ApplicantNoteCreate
from .base import CRUDBase


class CRUDApplicantNote(CRUDBase[ApplicantNote]):
    """备注 CRUD 操作类（备注只能新增，不提供修改 / 删除）"""

    async def get_by_applicant(
        self,
        db: AsyncSession,
        applicant_id: str
    ) -> List[ApplicantNote]:
        """获取某应聘者的备注，最新在前"""
        result = await db.execute(
            select(self.model)
            .where(self.model.applicant_id == applicant_id)
            .order_by(self.model.created_at.desc(), self.model.id.desc())
        )
        return list(result.scalars().all())

    async def create_note(
        self,
        db: AsyncSession,
        *,
        applicant_id: str,
        user_id: str,
        obj_in: ApplicantNoteCreate
    ) -> ApplicantNote:
        """创建备注"""
        note = await self.create(db, obj_in={
            "applicant_id": applicant_id,
            "user_id": user_id,
            "note": obj_in.note,
        })
        # 新建对象不会自动加载作者
        await db.refresh(note, attribute_names=["user"])
        return note


note_crud = CRUDApplicantNote(ApplicantNote)
