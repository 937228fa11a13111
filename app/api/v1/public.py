"""
公开 API 路由（无需登录）

求职者在线投递
"""
from fastapi import APIRouter, Depends, Request

from app.api.deps import get_applicant_service, read_payload
from app.core.response import success_response, ResponseModel
from app.models.applicant import ApplicantResponse
from app.services.applicant_service import ApplicantService

router = APIRouter()


@router.post(
    "/applicants",
    summary="提交求职申请",
    status_code=201,
    response_model=ResponseModel[ApplicantResponse],
)
async def submit_application(
    request: Request,
    service: ApplicantService = Depends(get_applicant_service),
):
    """
    公开投递入口，状态固定为 submitted；
    成功后通知招聘人员，并向应聘者发送确认邮件
    """
    payload, cv = await read_payload(request)
    applicant = await service.create(payload, cv, notify=True)
    return success_response(
        data=ApplicantResponse.model_validate(applicant).model_dump(),
        message="申请提交成功",
        code=201,
    )
