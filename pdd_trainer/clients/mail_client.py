# -*- coding: utf-8 -*-
"""
pdd_trainer/clients/mail_client.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Клиент отправки почты.

Поддерживаемые транспорты:

* ``smtp``: отправка через SMTP (STARTTLS), блокирующий вызов уходит в threadpool;
* ``console``: письмо только пишется в лог (разработка).
"""

import smtplib
from email.message import EmailMessage

from starlette.concurrency import run_in_threadpool

from pdd_trainer.config.logger import configure_logger
from pdd_trainer.config.settings import settings
from pdd_trainer.utils.exceptions import EmailDeliveryError

logger = configure_logger()

MAIL_BACKENDS = ("smtp", "console")


class MailClient:
    """Отправка HTML-писем через выбранный транспорт."""

    def __init__(
        self,
        backend: str = "console",
        host: str | None = None,
        port: int | None = None,
        user: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        timeout: int = 15,
        sender: str | None = None,
    ):
        if backend not in MAIL_BACKENDS:
            raise ValueError(f"Неизвестный почтовый транспорт: {backend}")
        self.backend = backend
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout
        self.sender = sender or settings.mail_from

    @classmethod
    def from_settings(cls) -> "MailClient":
        return cls(
            backend=settings.mail_backend.lower(),
            host=settings.smtp_host,
            port=settings.smtp_port,
            user=settings.smtp_user,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
            timeout=settings.smtp_timeout,
            sender=settings.mail_from,
        )

    async def send(self, to: str, subject: str, html: str) -> None:
        """
        Отправить письмо.

        Args:
            to: Адрес получателя
            subject: Тема письма
            html: HTML-тело письма

        Raises:
            EmailDeliveryError: Транспорт не смог доставить письмо
        """
        if self.backend == "console":
            logger.info(f"📧 Письмо для {to}: {subject}\n{html}")
            return

        message = self._build_message(to, subject, html)
        try:
            await run_in_threadpool(self._send_smtp, message)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error(f"❌ Не удалось отправить письмо на {to}: {exc}")
            raise EmailDeliveryError() from exc
        logger.info(f"📧 Письмо «{subject}» отправлено на {to}")

    def _build_message(self, to: str, subject: str, html: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content("Для просмотра письма нужен почтовый клиент с поддержкой HTML.")
        message.add_alternative(html, subtype="html")
        return message

    def _send_smtp(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            if self.use_tls:
                smtp.starttls()
            if self.user and self.password:
                smtp.login(self.user, self.password)
            smtp.send_message(message)


def get_mail_client() -> MailClient:
    """Зависимость FastAPI: почтовый клиент по текущим настройкам."""
    return MailClient.from_settings()
