"""
应聘者生命周期服务测试（不经过 HTTP）

直接调用 ApplicantService，验证事件发出时机、简历文件处理和校验
"""
import io
from typing import List

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from app.core.config import settings
from app.core.exceptions import NotFoundException, ValidationException
from app.core.storage import LocalStorage
from app.crud import applicant_crud
from app.models.applicant import Applicant
from app.services.applicant_service import ApplicantService
from app.services.events import ApplicantStatusChanged, ApplicantSubmitted, EventBus


def upload(data: bytes, filename: str = "cv.pdf", size: int = None) -> UploadFile:
    return UploadFile(file=io.BytesIO(data), filename=filename, size=size)


def payload(**overrides) -> dict:
    return {
        "position_applied_for": "Data Analyst",
        "last_name": "Garcia",
        "first_name": "Lea",
        "permanent_address": "Pasig City",
        "gender": "Female",
        "civil_status": "Single",
        "birthdate": "1998-07-21",
        "age": 26,
        "highest_education_level": "Bachelor",
        "last_school_attended": "Tech Institute",
        "contact_number": "09175550000",
        "email_address": "lea@example.com",
        "preferred_work_location": "Pasig",
        **overrides
    }


class EventRecorder:
    def __init__(self, bus: EventBus):
        self.events: List = []
        bus.subscribe(ApplicantSubmitted, self.record)
        bus.subscribe(ApplicantStatusChanged, self.record)

    async def record(self, event) -> None:
        self.events.append(event)


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def recorder(bus: EventBus) -> EventRecorder:
    return EventRecorder(bus)


@pytest.fixture
def service(db_session: AsyncSession, storage: LocalStorage, bus: EventBus) -> ApplicantService:
    return ApplicantService(db_session, storage, bus)


@pytest.mark.asyncio
async def test_create_emits_only_when_notify(service: ApplicantService, recorder: EventRecorder):
    await service.create(payload(), notify=False)
    assert recorder.events == []

    applicant = await service.create(payload(email_address="other@example.com"), notify=True)
    assert len(recorder.events) == 1
    event = recorder.events[0]
    assert isinstance(event, ApplicantSubmitted)
    assert event.applicant.id == applicant.id
    assert event.applicant.status == "submitted"


@pytest.mark.asyncio
async def test_event_is_emitted_after_commit(
    db_session: AsyncSession, storage: LocalStorage, bus: EventBus
):
    """订阅者执行时数据已提交，另一个连接能读到记录"""
    seen = []

    async def check(event: ApplicantSubmitted) -> None:
        async with AsyncSession(db_session.bind) as other:
            seen.append(await other.get(Applicant, event.applicant.id))

    bus.subscribe(ApplicantSubmitted, check)
    service = ApplicantService(db_session, storage, bus)
    await service.create(payload(), notify=True)

    assert len(seen) == 1
    assert seen[0] is not None


@pytest.mark.asyncio
async def test_failing_subscriber_does_not_undo_create(
    db_session: AsyncSession, service: ApplicantService, bus: EventBus, recorder: EventRecorder
):
    async def broken(event) -> None:
        raise RuntimeError("mail server down")

    bus.subscribe(ApplicantSubmitted, broken)
    applicant = await service.create(payload(), notify=True)

    assert len(recorder.events) == 1
    assert await applicant_crud.get(db_session, applicant.id) is not None


@pytest.mark.asyncio
async def test_update_emits_status_change_once(service: ApplicantService, recorder: EventRecorder):
    applicant = await service.create(payload())

    await service.update(applicant, {"contact_number": "09170001111"})
    await service.update(applicant, {"status": "submitted"})
    assert recorder.events == []

    await service.update(applicant, {"status": "rejected"})
    assert len(recorder.events) == 1
    event = recorder.events[0]
    assert event.previous_status == "submitted"
    assert event.new_status == "rejected"
    assert event.applicant_id == applicant.id


@pytest.mark.asyncio
async def test_validation_collects_field_and_file_errors(service: ApplicantService):
    with pytest.raises(ValidationException) as exc_info:
        await service.create(payload(age="old"), upload(b"x", filename="cv.exe"))

    fields = exc_info.value.data["fields"]
    assert set(fields) == {"age", "upload_cv"}


@pytest.mark.asyncio
async def test_oversized_cv_is_rejected_without_leftovers(
    db_session: AsyncSession, storage: LocalStorage, bus: EventBus
):
    config = settings.model_copy(update={"cv_max_size_kb": 1})
    service = ApplicantService(db_session, storage, bus, config)

    # 已知大小：写入前拒绝
    with pytest.raises(ValidationException):
        await service.create(payload(), upload(b"a" * 2048, size=2048))

    # 未知大小：写入过程中拒绝并删除半成品
    with pytest.raises(ValidationException):
        await service.create(payload(), upload(b"a" * 2048))

    cv_dir = storage.root / "cvs"
    assert not cv_dir.exists() or list(cv_dir.iterdir()) == []
    assert await applicant_crud.count(db_session) == 0


@pytest.mark.asyncio
async def test_replacing_cv_survives_missing_old_file(
    service: ApplicantService, storage: LocalStorage
):
    applicant = await service.create(payload(), upload(b"first"))
    old_key = applicant.cv_path
    storage.delete(old_key)

    applicant = await service.update(applicant, {}, upload(b"second", filename="cv.docx"))
    assert applicant.cv_path != old_key
    assert service.cv_file(applicant).read_bytes() == b"second"


@pytest.mark.asyncio
async def test_failed_update_keeps_old_cv_and_drops_new_one(
    db_session: AsyncSession,
    service: ApplicantService,
    storage: LocalStorage,
    monkeypatch: pytest.MonkeyPatch,
):
    """保存失败时新文件被清理，记录仍指向完好的旧简历"""
    applicant = await service.create(payload(), upload(b"first"))
    old_key = applicant.cv_path

    async def broken(*args, **kwargs):
        raise OperationalError("UPDATE applicants", {}, Exception("database is locked"))

    monkeypatch.setattr(applicant_crud, "update_applicant", broken)
    with pytest.raises(OperationalError):
        await service.update(applicant, {}, upload(b"second", filename="cv.docx"))
    await db_session.rollback()

    stored = await applicant_crud.get(db_session, applicant.id)
    assert stored.cv_path == old_key
    assert service.cv_file(stored).read_bytes() == b"first"
    assert [p.name for p in (storage.root / "cvs").iterdir()] == [old_key.split("/")[-1]]


@pytest.mark.asyncio
async def test_cv_file_without_upload(service: ApplicantService):
    applicant = await service.create(payload())
    with pytest.raises(NotFoundException):
        service.cv_file(applicant)
