"""
通知分发模块

订阅应聘者生命周期事件并发送邮件：
1. 新的公开申请 -> 每位招聘人员（admin / recruiter）各一封，没有收件人时跳过
2. 新的公开申请 -> 应聘者本人（确认收到）
3. 状态变更 -> 应聘者本人

发送失败只记录日志，不重试，也不回滚数据
"""
from typing import List
from urllib.parse import urlencode

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.crud import user_crud
from app.models.applicant import ApplicantResponse
from .events import ApplicantStatusChanged, ApplicantSubmitted, EventBus
from .mailer import MailMessage, Mailer


def new_submission_message(applicant: ApplicantResponse, recipient: str) -> MailMessage:
    """招聘人员：新申请提醒"""
    return MailMessage(
        to=[recipient],
        subject="New applicant submission",
        greeting="Hello",
        lines=[
            "A new applicant has submitted an application.",
            f"Name: {applicant.first_name} {applicant.last_name}",
            f"Position: {applicant.position_applied_for}",
            f"Email: {applicant.email_address}",
            f"Contact: {applicant.contact_number}",
            f"Status: {applicant.status}",
        ],
    )


def submission_received_message(applicant: ApplicantResponse) -> MailMessage:
    """应聘者：申请已收到"""
    return MailMessage(
        to=[applicant.email_address],
        subject="We received your application",
        greeting=f"Hi {applicant.first_name},",
        lines=[
            f"Thank you for applying for {applicant.position_applied_for}.",
            "We will review your application and update you via email.",
            f"Current status: {applicant.status}",
        ],
    )


def status_updated_message(applicant: ApplicantResponse, new_status: str) -> MailMessage:
    """应聘者：状态更新"""
    return MailMessage(
        to=[applicant.email_address],
        subject="Application status updated",
        greeting=f"Hi {applicant.first_name},",
        lines=[
            "Your application status has been updated.",
            f"New status: {new_status}",
            "If you have questions, reply to this email.",
        ],
    )


def password_reset_message(email: str, token: str) -> MailMessage:
    """后台用户：重置密码链接"""
    query = urlencode({"token": token, "email": email})
    url = f"{settings.frontend_url.rstrip('/')}/admin/reset-password?{query}"
    return MailMessage(
        to=[email],
        subject="Reset your password",
        lines=["We received a request to reset the password for your account."],
        action=("Reset password", url),
        outro=["If you did not request a password reset, no further action is required."],
    )


class NotificationDispatcher:
    """应聘者事件 -> 邮件通知"""

    def __init__(self, db: AsyncSession, mailer: Mailer, staff_roles: List[str] = None):
        self.db = db
        self.mailer = mailer
        self.staff_roles = staff_roles or settings.staff_roles

    def register(self, bus: EventBus) -> EventBus:
        bus.subscribe(ApplicantSubmitted, self.notify_staff)
        bus.subscribe(ApplicantSubmitted, self.acknowledge_applicant)
        bus.subscribe(ApplicantStatusChanged, self.notify_status_changed)
        return bus

    async def notify_staff(self, event: ApplicantSubmitted) -> None:
        """每位招聘人员单独一封，收件人之间互不可见"""
        staff = await user_crud.get_by_roles(self.db, self.staff_roles)
        recipients = [user.email for user in staff if user.email]
        if not recipients:
            logger.info(f"没有招聘人员收件人，跳过新申请通知: {event.applicant.id}")
            return
        for recipient in recipients:
            try:
                await self.mailer.send(new_submission_message(event.applicant, recipient))
            except Exception:
                logger.exception(f"新申请通知发送失败: {recipient}")

    async def acknowledge_applicant(self, event: ApplicantSubmitted) -> None:
        if not event.applicant.email_address:
            return
        await self.mailer.send(submission_received_message(event.applicant))

    async def notify_status_changed(self, event: ApplicantStatusChanged) -> None:
        if event.previous_status == event.new_status or not event.applicant.email_address:
            return
        await self.mailer.send(status_updated_message(event.applicant, event.new_status))
