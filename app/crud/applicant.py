"""
应聘者 CRUD 操作

包含列表查询（筛选 / 排序 / 分页）和报表统计
"""
from datetime import datetime, timedelta
from typing import Any, Dict, List, Tuple
from sqlalchemy import Date, Select, delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.applicant import Applicant, ApplicantFilter, PAGE_SIZE
from app.models.base import utc_now
from app.models.note import ApplicantNote
from .base import CRUDBase

# 报表“近期”窗口
RECENT_DAYS = 30


class CRUDApplicant(CRUDBase[Applicant]):
    """应聘者 CRUD 操作类"""

    def build_search_query(self, filters: ApplicantFilter) -> Select:
        """
        根据查询参数构造列表查询

        - search: 名 / 姓 / 邮箱 / 应聘岗位 任一字段包含关键字（不区分大小写）
        - status / position: 精确匹配
        - start_date / end_date: 按 created_at 的日期部分闭区间过滤
        - 排序键相同时再按 created_at、id 排序，保证分页稳定
        """
        model = self.model
        query = select(model)

        if filters.search:
            term = filters.search
            query = query.where(or_(
                model.first_name.icontains(term, autoescape=True),
                model.last_name.icontains(term, autoescape=True),
                model.email_address.icontains(term, autoescape=True),
                model.position_applied_for.icontains(term, autoescape=True),
            ))

        if filters.status:
            query = query.where(model.status == filters.status)

        if filters.position:
            query = query.where(model.position_applied_for == filters.position)

        created_date = func.date(model.created_at, type_=Date)
        if filters.start_date:
            query = query.where(created_date >= filters.start_date)
        if filters.end_date:
            query = query.where(created_date <= filters.end_date)

        columns = [getattr(model, filters.sort)]
        if filters.sort != "created_at":
            columns.append(model.created_at)
        columns.append(model.id)

        if filters.direction == "asc":
            query = query.order_by(*(col.asc() for col in columns))
        else:
            query = query.order_by(*(col.desc() for col in columns))
        return query

    async def search(
        self,
        db: AsyncSession,
        filters: ApplicantFilter,
        *,
        page_size: int = PAGE_SIZE
    ) -> Tuple[List[Applicant], int]:
        """筛选 / 排序 / 分页查询，返回 (当前页记录, 总数)"""
        query = self.build_search_query(filters)
        return await self.paginate(db, query, page=filters.page, page_size=page_size)

    async def create_applicant(
        self,
        db: AsyncSession,
        *,
        data: Dict[str, Any]
    ) -> Applicant:
        """创建应聘者记录"""
        return await self.create(db, obj_in=data)

    async def update_applicant(
        self,
        db: AsyncSession,
        *,
        db_obj: Applicant,
        data: Dict[str, Any]
    ) -> Applicant:
        """部分更新应聘者记录"""
        return await self.update(db, db_obj=db_obj, obj_in=data)

    async def delete_applicant(
        self,
        db: AsyncSession,
        *,
        db_obj: Applicant
    ) -> None:
        """删除应聘者及其全部备注"""
        await db.execute(
            delete(ApplicantNote).where(ApplicantNote.applicant_id == db_obj.id)
        )
        await db.delete(db_obj)
        await db.flush()

    async def count_since(self, db: AsyncSession, since: datetime) -> int:
        """统计某时间点之后创建的应聘者数量"""
        result = await db.execute(
            select(func.count())
            .select_from(self.model)
            .where(self.model.created_at >= since)
        )
        return result.scalar() or 0

    async def count_by_status(self, db: AsyncSession) -> List[Dict[str, Any]]:
        """按状态分组统计，状态名升序"""
        result = await db.execute(
            select(self.model.status, func.count(self.model.id).label("total"))
            .group_by(self.model.status)
            .order_by(self.model.status.asc())
        )
        return [{"status": status, "total": total} for status, total in result.all()]

    async def count_by_position(self, db: AsyncSession) -> List[Dict[str, Any]]:
        """按应聘岗位（原始文本）分组统计，数量降序"""
        total = func.count(self.model.id).label("total")
        result = await db.execute(
            select(self.model.position_applied_for, total)
            .group_by(self.model.position_applied_for)
            .order_by(total.desc(), self.model.position_applied_for.asc())
        )
        return [
            {"position_applied_for": position, "total": count}
            for position, count in result.all()
        ]

    async def overview(self, db: AsyncSession, *, now: datetime = None) -> Dict[str, Any]:
        """报表概览，每次请求实时计算"""
        now = now or utc_now()
        return {
            "total_applicants": await self.count(db),
            "recent_count": await self.count_since(db, now - timedelta(days=RECENT_DAYS)),
            "by_status": await self.count_by_status(db),
            "by_position": await self.count_by_position(db),
        }


applicant_crud = CRUDApplicant(Applicant)
