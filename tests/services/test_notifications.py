"""
事件总线与邮件通知测试
"""
from datetime import date, datetime, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.applicant import ApplicantResponse
from app.models.user import UserRole
from app.services.events import ApplicantStatusChanged, ApplicantSubmitted, EventBus
from app.services.mailer import MailMessage, SMTPMailer
from app.services.notifications import NotificationDispatcher, password_reset_message
from tests.conftest import RecordingMailer, create_user


def make_applicant(**overrides) -> ApplicantResponse:
    now = datetime.now(timezone.utc)
    data = {
        "id": "a1",
        "created_at": now,
        "updated_at": now,
        "position_applied_for": "Welder",
        "last_name": "Lim",
        "first_name": "Ben",
        "middle_name": None,
        "permanent_address": "Davao",
        "gender": "Male",
        "civil_status": "Single",
        "birthdate": date(1992, 3, 3),
        "age": 32,
        "highest_education_level": "Vocational",
        "bachelors_degree_course": None,
        "year_graduated": None,
        "last_school_attended": "Trade School",
        "prc_license": None,
        "total_work_experience_years": 5,
        "expected_salary": None,
        "preferred_work_location": "Davao",
        "vacancy_source": None,
        "contact_number": "09170000001",
        "email_address": "ben@example.com",
        "cv_path": None,
        "status": "submitted",
        **overrides
    }
    return ApplicantResponse.model_validate(data)


class FailingMailer(RecordingMailer):
    async def send(self, message: MailMessage) -> None:
        await super().send(message)
        raise ConnectionError("smtp unavailable")


@pytest.mark.asyncio
async def test_event_bus_isolates_failing_handlers():
    bus = EventBus()
    calls = []

    async def broken(event):
        raise ValueError("boom")

    async def healthy(event):
        calls.append(event)

    bus.subscribe(ApplicantSubmitted, broken)
    bus.subscribe(ApplicantSubmitted, healthy)

    event = ApplicantSubmitted(applicant=make_applicant())
    await bus.emit(event)
    assert calls == [event]


@pytest.mark.asyncio
async def test_event_bus_ignores_unsubscribed_events():
    await EventBus().emit(ApplicantSubmitted(applicant=make_applicant()))


@pytest.mark.asyncio
async def test_staff_message_goes_to_active_staff_only(db_session: AsyncSession):
    await create_user(db_session, "admin@example.com", UserRole.ADMIN)
    await create_user(db_session, "recruiter@example.com", UserRole.RECRUITER)
    await create_user(db_session, "viewer@example.com", UserRole.VIEWER)

    mailer = RecordingMailer()
    bus = NotificationDispatcher(db_session, mailer).register(EventBus())
    await bus.emit(ApplicantSubmitted(applicant=make_applicant()))

    staff_mails = [m for m in mailer.sent if m.subject == "New applicant submission"]
    assert sorted(m.to[0] for m in staff_mails) == ["admin@example.com", "recruiter@example.com"]
    # 每封只有一个收件人，招聘人员之间看不到彼此的邮箱
    assert all(len(m.to) == 1 for m in staff_mails)
    assert "Name: Ben Lim" in staff_mails[0].lines
    assert len(mailer.sent) == 3


@pytest.mark.asyncio
async def test_mail_failures_are_swallowed(db_session: AsyncSession):
    """发送失败只记录日志，两个订阅者都会被调用"""
    await create_user(db_session, "admin@example.com", UserRole.ADMIN)

    mailer = FailingMailer()
    bus = NotificationDispatcher(db_session, mailer).register(EventBus())
    await bus.emit(ApplicantSubmitted(applicant=make_applicant()))

    assert len(mailer.sent) == 2


@pytest.mark.asyncio
async def test_staff_send_failure_does_not_skip_other_staff(db_session: AsyncSession):
    await create_user(db_session, "admin@example.com", UserRole.ADMIN)
    await create_user(db_session, "recruiter@example.com", UserRole.RECRUITER)

    mailer = FailingMailer()
    dispatcher = NotificationDispatcher(db_session, mailer)
    await dispatcher.notify_staff(ApplicantSubmitted(applicant=make_applicant()))

    assert sorted(m.to[0] for m in mailer.sent) == ["admin@example.com", "recruiter@example.com"]


@pytest.mark.asyncio
async def test_status_change_message(db_session: AsyncSession):
    mailer = RecordingMailer()
    bus = NotificationDispatcher(db_session, mailer).register(EventBus())

    await bus.emit(ApplicantStatusChanged(
        applicant=make_applicant(status="hired"),
        previous_status="offer_extended",
        new_status="hired",
    ))
    assert mailer.subjects() == ["Application status updated"]
    assert mailer.sent[0].greeting == "Hi Ben,"


def test_password_reset_message_link():
    message = password_reset_message("staff@example.com", "abc123")
    text, url = message.action
    assert text == "Reset password"
    assert url.endswith("/admin/reset-password?token=abc123&email=staff%40example.com")


def test_smtp_message_has_text_and_html_parts():
    mailer = SMTPMailer(host="localhost", port=25, from_address="hr@example.com", from_name="HR")
    msg = mailer._build(MailMessage(
        to=["a@example.com", "b@example.com"],
        subject="Hello",
        greeting="Hi <team>",
        lines=["line one"],
    ))
    assert msg["To"] == "a@example.com, b@example.com"
    assert msg["From"] == "HR <hr@example.com>"
    parts = [part.get_content_type() for part in msg.get_payload()]
    assert parts == ["text/plain", "text/html"]
    assert "Hi &lt;team&gt;" in MailMessage(
        to=[], subject="", greeting="Hi <team>"
    ).render_html()
