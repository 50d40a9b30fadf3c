# simplishare/email_service.py
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart

from fastapi import Request
from fastapi.concurrency import run_in_threadpool

from .core.config import Settings
from .core.validation import validate_payload
from .exceptions import EmailSendFailedError
from .logging_config import get_logger
from .schemas.email import EmailMessage

logger = get_logger("email")


class EmailService:
    """Transactional email over SMTP: verification codes and reset links"""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.enabled = settings.email_enabled
        if not self.enabled:
            logger.info("Email service is DISABLED. Set EMAIL_ENABLED=true to enable.")

    def render_template(self, message: EmailMessage) -> str:
        """Pick the body for a message: explicit html, OTP code, or reset link"""
        if message.html:
            return message.html

        if message.otp:
            return f"""
    <div style="font-family: Arial, sans-serif; line-height: 1.6;">
        <h2 style="color: #333;">Verify Your Email Address</h2>
        <p>{self.settings.smtp_from_name}</p>
        <p>Please use the OTP below to verify your email address:</p>
        <h3 style="background: #f3f3f3; padding: 10px; display: inline-block;">{message.otp}</h3>
        <p>This OTP will expire in {self.settings.otp_expire_minutes} minutes.</p>
        <p>If you did not request this, please ignore this email.</p>
    </div>
"""

        return f"""
    <div style="font-family: Arial, sans-serif; line-height: 1.6;">
        <h2 style="color: #333;">Reset Your Password</h2>
        <p>{self.settings.smtp_from_name}</p>
        <p>You have requested to reset your password. Click the link below to proceed:</p>
        <p>
            <a href="{message.reset_password_link}" style="background: #007bff; color: #fff; padding: 10px 20px; text-decoration: none; display: inline-block; border-radius: 5px;">
                Reset Password
            </a>
        </p>
        <p>This link will expire in {self.settings.reset_token_expire_minutes} minutes.</p>
        <p>If you did not request this, please ignore this email.</p>
    </div>
"""

    def _deliver(self, message: EmailMessage, html_body: str) -> None:
        msg = MIMEMultipart('alternative')
        msg['Subject'] = message.subject
        msg['From'] = f"{self.settings.smtp_from_name} <{self.settings.smtp_from_email}>"
        msg['To'] = message.recipient_email

        if message.text:
            msg.attach(MIMEText(message.text, 'plain', 'utf-8'))
        msg.attach(MIMEText(html_body, 'html', 'utf-8'))

        with smtplib.SMTP(self.settings.smtp_host, self.settings.smtp_port, timeout=self.settings.smtp_timeout) as server:
            server.starttls()
            if self.settings.smtp_user and self.settings.smtp_password:
                server.login(self.settings.smtp_user, self.settings.smtp_password)
            server.send_message(msg)

    async def send_email(self, message: EmailMessage) -> None:
        """
        Send one message.

        Raises:
            EmailSendFailedError: the SMTP exchange failed
        """
        html_body = self.render_template(message)

        if not self.enabled:
            logger.info(f"[EMAIL DISABLED] Would send: {message.subject} to {message.recipient_email}")
            return

        try:
            await run_in_threadpool(self._deliver, message, html_body)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email: {str(e)}", exc_info=True)
            raise EmailSendFailedError(f"Failed to send email: {e}")

        logger.info(f"Email sent successfully: {message.subject} to {message.recipient_email}")

    async def send_otp_email(self, recipient_email: str, otp: str) -> None:
        """Send an email verification code"""
        await self.send_email(validate_payload(EmailMessage, {
            "recipient_email": recipient_email,
            "subject": f"SimpliShare: Here's the {len(otp)}-digit verification code you requested",
            "otp": otp,
        }))

    async def send_password_reset_email(self, recipient_email: str, reset_link: str) -> None:
        """Send a password reset link"""
        await self.send_email(validate_payload(EmailMessage, {
            "recipient_email": recipient_email,
            "subject": "SimpliShare: Reset your password",
            "reset_password_link": reset_link,
        }))


def get_email_service(request: Request) -> EmailService:
    return request.app.state.email_service
