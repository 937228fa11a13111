"""
应聘者管理 API 路由（招聘人员）
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_applicant_service, read_payload, require_staff, validate_schema
from app.core.database import get_db
from app.core.exceptions import NotFoundException
from app.core.response import (
    success_response,
    paged_response,
    ResponseModel,
    PagedResponseModel,
    MessageResponse,
)
from app.crud import applicant_crud
from app.models.applicant import Applicant, ApplicantFilter, ApplicantResponse, PAGE_SIZE
from app.services.applicant_service import ApplicantService

router = APIRouter(dependencies=[Depends(require_staff)])


async def get_applicant_or_404(db: AsyncSession, applicant_id: str) -> Applicant:
    applicant = await applicant_crud.get(db, applicant_id)
    if not applicant:
        raise NotFoundException(f"应聘者不存在: {applicant_id}")
    return applicant


@router.get("", summary="获取应聘者列表", response_model=PagedResponseModel[ApplicantResponse])
async def get_applicants(
    search: Optional[str] = Query(None, description="关键词（名 / 姓 / 邮箱 / 应聘岗位）"),
    status: Optional[str] = Query(None, description="状态（精确匹配）"),
    position: Optional[str] = Query(None, description="应聘岗位（精确匹配）"),
    start_date: Optional[str] = Query(None, description="创建日期起 YYYY-MM-DD（含）"),
    end_date: Optional[str] = Query(None, description="创建日期止 YYYY-MM-DD（含）"),
    sort: Optional[str] = Query(None, description="排序字段: created_at / last_name / status"),
    direction: Optional[str] = Query(None, description="排序方向: asc / desc"),
    page: int = Query(1, ge=1, description="页码"),
    db: AsyncSession = Depends(get_db),
):
    """
    获取应聘者列表，支持关键词搜索、条件筛选、排序和分页（每页 20 条）
    """
    filters = validate_schema(ApplicantFilter, {
        "search": search,
        "status": status,
        "position": position,
        "start_date": start_date,
        "end_date": end_date,
        "sort": sort,
        "direction": direction,
        "page": page,
    })

    applicants, total = await applicant_crud.search(db, filters)
    items = [ApplicantResponse.model_validate(a).model_dump() for a in applicants]
    return paged_response(items, total, filters.page, PAGE_SIZE)


@router.post(
    "",
    summary="录入应聘者",
    status_code=201,
    response_model=ResponseModel[ApplicantResponse],
)
async def create_applicant(
    request: Request,
    service: ApplicantService = Depends(get_applicant_service),
):
    """
    招聘人员代为录入应聘者（不发送通知），支持 JSON 或 multipart 表单
    """
    payload, cv = await read_payload(request)
    applicant = await service.create(payload, cv, notify=False)
    return success_response(
        data=ApplicantResponse.model_validate(applicant).model_dump(),
        message="应聘者创建成功",
        code=201,
    )


@router.get("/{applicant_id}", summary="获取应聘者详情", response_model=ResponseModel[ApplicantResponse])
async def get_applicant(
    applicant_id: str,
    db: AsyncSession = Depends(get_db),
):
    """
    根据 ID 获取应聘者详情
    """
    applicant = await get_applicant_or_404(db, applicant_id)
    return success_response(data=ApplicantResponse.model_validate(applicant).model_dump())


@router.api_route(
    "/{applicant_id}",
    methods=["PATCH", "PUT"],
    summary="更新应聘者",
    response_model=ResponseModel[ApplicantResponse],
)
async def update_applicant(
    applicant_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    service: ApplicantService = Depends(get_applicant_service),
):
    """
    部分更新应聘者信息；状态变化时通知应聘者，上传新简历时替换旧文件
    """
    applicant = await get_applicant_or_404(db, applicant_id)
    payload, cv = await read_payload(request)
    applicant = await service.update(applicant, payload, cv)
    return success_response(
        data=ApplicantResponse.model_validate(applicant).model_dump(),
        message="应聘者更新成功"
    )


@router.delete("/{applicant_id}", summary="删除应聘者", response_model=MessageResponse)
async def delete_applicant(
    applicant_id: str,
    db: AsyncSession = Depends(get_db),
    service: ApplicantService = Depends(get_applicant_service),
):
    """
    删除应聘者（同时删除简历文件和备注）
    """
    applicant = await get_applicant_or_404(db, applicant_id)
    await service.delete(applicant)
    return success_response(message="应聘者删除成功")


@router.get("/{applicant_id}/cv", summary="下载简历")
async def download_cv(
    applicant_id: str,
    db: AsyncSession = Depends(get_db),
    service: ApplicantService = Depends(get_applicant_service),
):
    """
    下载应聘者上传的简历文件
    """
    applicant = await get_applicant_or_404(db, applicant_id)
    path = service.cv_file(applicant)
    filename = f"{applicant.last_name}_{applicant.first_name}_cv{path.suffix}".replace(" ", "_")
    return FileResponse(path, filename=filename)
