"""
应聘者备注 API 路由（招聘人员）
"""
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_staff
from app.api.v1.applicants import get_applicant_or_404
from app.core.database import get_db
from app.core.response import success_response, ResponseModel
from app.crud import AuthContext, note_crud
from app.models.note import ApplicantNoteCreate, ApplicantNoteResponse

router = APIRouter(dependencies=[Depends(require_staff)])


@router.get(
    "/{applicant_id}/notes",
    summary="获取应聘者备注",
    response_model=ResponseModel[List[ApplicantNoteResponse]],
)
async def get_notes(
    applicant_id: str,
    db: AsyncSession = Depends(get_db),
):
    """
    获取应聘者的全部备注，最新在前
    """
    await get_applicant_or_404(db, applicant_id)
    notes = await note_crud.get_by_applicant(db, applicant_id)
    return success_response(
        data=[ApplicantNoteResponse.model_validate(n).model_dump() for n in notes]
    )


@router.post(
    "/{applicant_id}/notes",
    summary="添加备注",
    status_code=201,
    response_model=ResponseModel[ApplicantNoteResponse],
)
async def create_note(
    applicant_id: str,
    data: ApplicantNoteCreate,
    db: AsyncSession = Depends(get_db),
    auth: AuthContext = Depends(require_staff),
):
    """
    为应聘者添加备注，作者为当前登录用户
    """
    await get_applicant_or_404(db, applicant_id)

    note = await note_crud.create_note(
        db, applicant_id=applicant_id, user_id=auth.user.id, obj_in=data
    )
    return success_response(
        data=ApplicantNoteResponse.model_validate(note).model_dump(),
        message="备注添加成功",
        code=201,
    )
