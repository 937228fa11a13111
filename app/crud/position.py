"""
岗位 CRUD 操作
"""
from typing import List, Tuple
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.position import Position, PositionCreate, PositionUpdate
from .base import CRUDBase


class CRUDPosition(CRUDBase[Position]):
    """岗位 CRUD 操作类"""

    async def get_page(
        self,
        db: AsyncSession,
        *,
        page: int = 1,
        page_size: int = 20
    ) -> Tuple[List[Position], int]:
        """后台岗位列表（最新创建在前）"""
        query = select(self.model).order_by(
            self.model.created_at.desc(), self.model.id.desc()
        )
        return await self.paginate(db, query, page=page, page_size=page_size)

    async def get_active_positions(self, db: AsyncSession) -> List[Position]:
        """获取启用的岗位列表（公开接口，按名称排序）"""
        result = await db.execute(
            select(self.model)
            .where(self.model.is_active == True)  # noqa: E712
            .order_by(self.model.title.asc())
        )
        return list(result.scalars().all())

    async def create_position(
        self,
        db: AsyncSession,
        *,
        obj_in: PositionCreate
    ) -> Position:
        """创建岗位"""
        return await self.create(db, obj_in=obj_in.model_dump())

    async def update_position(
        self,
        db: AsyncSession,
        *,
        db_obj: Position,
        obj_in: PositionUpdate
    ) -> Position:
        """更新岗位"""
        update_data = obj_in.model_dump(exclude_unset=True)
        return await self.update(db, db_obj=db_obj, obj_in=update_data)


position_crud = CRUDPosition(Position)
