"""
岗位 API 路由

GET /positions 为公开的在招岗位列表，其余接口仅限招聘人员
"""
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_staff
from app.core.database import get_db
from app.core.response import (
    success_response,
    paged_response,
    ResponseModel,
    PagedResponseModel,
    MessageResponse,
)
from app.core.exceptions import NotFoundException
from app.crud import position_crud
from app.models.position import (
    Position,
    PositionCreate,
    PositionUpdate,
    PositionResponse,
)

router = APIRouter()
staff_only = [Depends(require_staff)]

PAGE_SIZE = 20


async def get_position_or_404(db: AsyncSession, position_id: str) -> Position:
    position = await position_crud.get(db, position_id)
    if not position:
        raise NotFoundException(f"岗位不存在: {position_id}")
    return position


@router.get("", summary="获取在招岗位", response_model=ResponseModel[List[PositionResponse]])
async def get_open_positions(
    db: AsyncSession = Depends(get_db),
):
    """
    公开接口：启用中的岗位，按岗位名称排序，不分页
    """
    positions = await position_crud.get_active_positions(db)
    return success_response(
        data=[PositionResponse.model_validate(p).model_dump() for p in positions]
    )


# 固定路径 /all 先于 /{position_id} 注册
@router.get(
    "/all",
    summary="获取岗位列表",
    response_model=PagedResponseModel[PositionResponse],
    dependencies=staff_only,
)
async def get_positions(
    page: int = Query(1, ge=1, description="页码"),
    db: AsyncSession = Depends(get_db),
):
    """
    获取全部岗位（含已停用），最新创建在前，每页 20 条
    """
    positions, total = await position_crud.get_page(db, page=page, page_size=PAGE_SIZE)
    items = [PositionResponse.model_validate(p).model_dump() for p in positions]
    return paged_response(items, total, page, PAGE_SIZE)


@router.post(
    "",
    summary="创建岗位",
    status_code=201,
    response_model=ResponseModel[PositionResponse],
    dependencies=staff_only,
)
async def create_position(
    data: PositionCreate,
    db: AsyncSession = Depends(get_db),
):
    """
    创建新岗位
    """
    position = await position_crud.create_position(db, obj_in=data)
    return success_response(
        data=PositionResponse.model_validate(position).model_dump(),
        message="岗位创建成功",
        code=201,
    )


@router.get(
    "/{position_id}",
    summary="获取岗位详情",
    response_model=ResponseModel[PositionResponse],
    dependencies=staff_only,
)
async def get_position(
    position_id: str,
    db: AsyncSession = Depends(get_db),
):
    """
    根据 ID 获取岗位详情
    """
    position = await get_position_or_404(db, position_id)
    return success_response(data=PositionResponse.model_validate(position).model_dump())


@router.api_route(
    "/{position_id}",
    methods=["PATCH", "PUT"],
    summary="更新岗位",
    response_model=ResponseModel[PositionResponse],
    dependencies=staff_only,
)
async def update_position(
    position_id: str,
    data: PositionUpdate,
    db: AsyncSession = Depends(get_db),
):
    """
    更新岗位信息（部分更新）
    """
    position = await get_position_or_404(db, position_id)
    position = await position_crud.update_position(db, db_obj=position, obj_in=data)
    return success_response(
        data=PositionResponse.model_validate(position).model_dump(),
        message="岗位更新成功"
    )


@router.delete(
    "/{position_id}",
    summary="删除岗位",
    response_model=MessageResponse,
    dependencies=staff_only,
)
async def delete_position(
    position_id: str,
    db: AsyncSession = Depends(get_db),
):
    """
    删除岗位（不影响已有的应聘记录）
    """
    await get_position_or_404(db, position_id)
    await position_crud.delete(db, id=position_id)
    return success_response(message="岗位删除成功")


