"""
报表 API 路由（招聘人员）
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_staff
from app.core.database import get_db
from app.core.response import success_response, ResponseModel
from app.crud import applicant_crud
from app.models.applicant import DashboardOverview

router = APIRouter(dependencies=[Depends(require_staff)])


@router.get("/overview", summary="获取申请统计概览", response_model=ResponseModel[DashboardOverview])
async def get_overview(
    db: AsyncSession = Depends(get_db),
):
    """
    总数、近 30 天新增、按状态统计、按应聘岗位统计（每次请求实时计算）
    """
    overview = await applicant_crud.overview(db)
    return success_response(data=DashboardOverview.model_validate(overview).model_dump())
