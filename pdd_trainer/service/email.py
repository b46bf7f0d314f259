# -*- coding: utf-8 -*-
"""
pdd_trainer/service/email.py
~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Шаблоны транзакционных писем: подтверждение email и сброс пароля.
"""

from fastapi import Depends

from pdd_trainer.clients.mail_client import MailClient, get_mail_client
from pdd_trainer.config.settings import settings

_LAYOUT = """\
<div style="font-family: Arial, sans-serif; max-width: 560px; margin: 0 auto;">
  <h2 style="color: #1f4e79;">Тесты ПДД</h2>
  {body}
  <p style="color: #888; font-size: 12px;">
    Если вы не запрашивали это письмо, просто проигнорируйте его.
  </p>
</div>
"""


class EmailService:
    """Формирует письма и передаёт их почтовому клиенту."""

    def __init__(self, mail_client: MailClient):
        self.mail_client = mail_client

    @staticmethod
    def build_link(path: str, token: str) -> str:
        return f"{settings.frontend_url.rstrip('/')}/{path}?token={token}"

    async def send_verification_email(self, email: str, token: str) -> None:
        link = self.build_link("verify-email", token)
        body = (
            "<p>Спасибо за регистрацию!</p>"
            "<p>Чтобы подтвердить адрес электронной почты, перейдите по ссылке:</p>"
            f'<p><a href="{link}">{link}</a></p>'
            f"<p>Ссылка действительна {settings.verification_token_ttl_hours} ч.</p>"
        )
        await self.mail_client.send(
            email, "Подтверждение email", _LAYOUT.format(body=body)
        )

    async def send_password_reset_email(self, email: str, token: str) -> None:
        link = self.build_link("reset-password", token)
        body = (
            "<p>Вы запросили сброс пароля.</p>"
            "<p>Чтобы задать новый пароль, перейдите по ссылке:</p>"
            f'<p><a href="{link}">{link}</a></p>'
            f"<p>Ссылка действительна {settings.reset_token_ttl_minutes} мин.</p>"
        )
        await self.mail_client.send(
            email, "Сброс пароля", _LAYOUT.format(body=body)
        )


def get_email_service(
    mail_client: MailClient = Depends(get_mail_client),
) -> EmailService:
    return EmailService(mail_client)
