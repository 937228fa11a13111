"""
服务层模块
"""
from .events import EventBus, ApplicantSubmitted, ApplicantStatusChanged
from .mailer import Mailer, MailMessage, LogMailer, SMTPMailer, get_mailer
from .notifications import NotificationDispatcher
from .applicant_service import ApplicantService

__all__ = [
    # 事件
    "EventBus",
    "ApplicantSubmitted",
    "ApplicantStatusChanged",
    # 邮件
    "Mailer",
    "MailMessage",
    "LogMailer",
    "SMTPMailer",
    "get_mailer",
    # 通知
    "NotificationDispatcher",
    # 应聘者生命周期
    "ApplicantService",
]
