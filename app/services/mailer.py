"""
邮件发送模块

SMTPMailer 通过 smtplib 发送（在线程中执行，不阻塞事件循环）；
未配置 SMTP 时使用 LogMailer，只记录日志。
"""
import asyncio
import html
import smtplib
from dataclasses import dataclass, field
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import List, Optional, Tuple

from loguru import logger

from app.core.config import Settings, settings


@dataclass
class MailMessage:
    """邮件内容：问候语 + 若干正文行 + 可选的操作链接"""
    to: List[str]
    subject: str
    lines: List[str] = field(default_factory=list)
    greeting: Optional[str] = None
    action: Optional[Tuple[str, str]] = None  # (按钮文字, 链接)
    outro: List[str] = field(default_factory=list)

    def render_text(self) -> str:
        parts = []
        if self.greeting:
            parts.append(self.greeting)
        parts.extend(self.lines)
        if self.action:
            parts.append(f"{self.action[0]}: {self.action[1]}")
        parts.extend(self.outro)
        return "\n\n".join(parts)

    def render_html(self) -> str:
        body = []
        if self.greeting:
            body.append(f"<h2>{html.escape(self.greeting)}</h2>")
        body.extend(f"<p>{html.escape(line)}</p>" for line in self.lines)
        if self.action:
            text, url = self.action
            body.append(f'<p><a href="{html.escape(url, quote=True)}">{html.escape(text)}</a></p>')
        body.extend(f"<p>{html.escape(line)}</p>" for line in self.outro)
        return (
            "<!DOCTYPE html><html><body style=\"font-family: Arial, sans-serif;\">"
            + "".join(body)
            + "</body></html>"
        )


class Mailer:
    """邮件发送基类"""

    async def send(self, message: MailMessage) -> None:
        raise NotImplementedError


class LogMailer(Mailer):
    """只记录日志的发送器（开发环境）"""

    async def send(self, message: MailMessage) -> None:
        logger.info(f"[Mail] to={', '.join(message.to)} subject={message.subject}\n{message.render_text()}")


class SMTPMailer(Mailer):
    """SMTP 发送器，发送失败时抛出异常，由调用方决定是否忽略"""

    def __init__(
        self,
        host: str,
        port: int,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
        from_address: str = "no-reply@example.com",
        from_name: str = "",
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.from_address = from_address
        self.from_name = from_name

    @classmethod
    def from_settings(cls, config: Settings) -> "SMTPMailer":
        return cls(
            host=config.smtp_host,
            port=config.smtp_port,
            username=config.smtp_user,
            password=config.smtp_password,
            use_tls=config.smtp_use_tls,
            from_address=config.mail_from,
            from_name=config.mail_from_name,
        )

    def _build(self, message: MailMessage) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = message.subject
        msg["From"] = f"{self.from_name} <{self.from_address}>" if self.from_name else self.from_address
        msg["To"] = ", ".join(message.to)
        msg.attach(MIMEText(message.render_text(), "plain", "utf-8"))
        msg.attach(MIMEText(message.render_html(), "html", "utf-8"))
        return msg

    def _send_sync(self, message: MailMessage) -> None:
        msg = self._build(message)
        with smtplib.SMTP(self.host, self.port, timeout=30) as server:
            if self.use_tls:
                server.starttls()
            if self.username and self.password:
                server.login(self.username, self.password)
            server.sendmail(self.from_address, message.to, msg.as_string())

    async def send(self, message: MailMessage) -> None:
        await asyncio.to_thread(self._send_sync, message)
        logger.info(f"[Mail] 已发送: {message.subject} -> {', '.join(message.to)}")


def get_mailer() -> Mailer:
    """邮件发送器依赖注入（测试中可覆盖）"""
    if settings.smtp_host:
        return SMTPMailer.from_settings(settings)
    return LogMailer()
