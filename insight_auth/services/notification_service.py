"""Notification service: renders account emails and hands them to a mailer"""

import asyncio
import smtplib
from abc import ABC, abstractmethod
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import structlog
from jinja2 import Environment, PackageLoader, select_autoescape

from insight_auth.config import settings

logger = structlog.get_logger()

WELCOME_SUBJECT = "Welcome to Insight"
INVITE_SUBJECT = "You've been invited to Insight"
PASSWORD_RESET_SUBJECT = "Reset your Insight password"


class Mailer(ABC):
    """Transport that delivers a rendered message to one address"""

    @abstractmethod
    async def send(self, recipient: str, subject: str, html_body: str) -> bool:
        """
        Deliver a message.

        Returns:
            True if the message was accepted for delivery, False otherwise
        """


class SmtpMailer(Mailer):
    """
    SMTP transport.

    Without an SMTP host (local development) the rendered message is logged
    instead of sent, so links can be picked up from the service log.
    """

    def __init__(
        self,
        host: str = settings.SMTP_HOST,
        port: int = settings.SMTP_PORT,
        user: str = settings.SMTP_USER,
        password: str = settings.SMTP_PASSWORD,
        from_email: str = settings.EMAIL_FROM,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.from_email = from_email

    async def send(self, recipient: str, subject: str, html_body: str) -> bool:
        if not self.host:
            logger.info(
                "email_logged",
                reason="smtp_not_configured",
                recipient=recipient,
                subject=subject,
                body=html_body,
            )
            return True

        return await asyncio.to_thread(self._send_sync, recipient, subject, html_body)

    def _send_sync(self, recipient: str, subject: str, html_body: str) -> bool:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.from_email
        msg["To"] = recipient
        msg.attach(MIMEText(html_body, "html"))

        try:
            with smtplib.SMTP(self.host, self.port) as server:
                if self.user and self.password:
                    server.starttls()
                    server.login(self.user, self.password)
                server.sendmail(self.from_email, recipient, msg.as_string())
        except smtplib.SMTPAuthenticationError as e:
            logger.error("email_auth_error", error=str(e), smtp_host=self.host)
            return False
        except (smtplib.SMTPException, OSError) as e:
            logger.error("email_failed", error=str(e), recipient=recipient, smtp_host=self.host)
            return False

        logger.info("email_sent", recipient=recipient, subject=subject, smtp_host=self.host)
        return True


class NotificationService:
    """Renders the welcome, invite and password reset emails"""

    def __init__(self, mailer: Mailer, frontend_url: str = settings.FRONTEND_URL):
        self.mailer = mailer
        self.frontend_url = frontend_url.rstrip("/")
        self.env = Environment(
            loader=PackageLoader("insight_auth", "templates"),
            autoescape=select_autoescape(["html"]),
        )

    def _link(self, path: str, email: str, organization_id: str, token: str) -> str:
        query = urlencode({"email": email, "orgId": organization_id, "token": token})
        return f"{self.frontend_url}/{path}?{query}"

    def render(self, template_name: str, variables: Dict[str, Any]) -> str:
        return self.env.get_template(f"{template_name}.html").render(**variables)

    async def _send_template(
        self,
        recipient: str,
        subject: str,
        template_name: str,
        variables: Dict[str, Any],
    ) -> bool:
        html_body = self.render(template_name, variables)
        sent = await self.mailer.send(recipient, subject, html_body)
        if not sent:
            logger.warning("notification_failed", recipient=recipient, template=template_name)
        return sent

    async def send_welcome_email(self, email: str, organization_id: str, token: str) -> bool:
        return await self._send_template(
            email,
            WELCOME_SUBJECT,
            "welcome",
            {
                "email": email,
                "org_id": organization_id,
                "link": self._link("signup-complete", email, organization_id, token),
                "expiry_hours": settings.SIGNUP_EXPIRY_HOURS,
            },
        )

    async def send_invite_email(
        self,
        email: str,
        organization_id: str,
        token: str,
        creator: str,
        role: Optional[str] = None,
    ) -> bool:
        return await self._send_template(
            email,
            INVITE_SUBJECT,
            "invite",
            {
                "email": email,
                "org_id": organization_id,
                "creator": creator,
                "role": role,
                "link": self._link("accept-invite", email, organization_id, token),
            },
        )

    async def send_password_reset_email(self, email: str, organization_id: str, token: str) -> bool:
        return await self._send_template(
            email,
            PASSWORD_RESET_SUBJECT,
            "password_reset",
            {
                "email": email,
                "org_id": organization_id,
                "link": self._link("password-reset", email, organization_id, token),
            },
        )
