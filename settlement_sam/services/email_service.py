"""
Email service - handles sending emails.
Carries both lead notifications to clients and email-to-SMS codes.
Currently supports: Mock (development) and SMTP (production ready).
"""
import asyncio
import logging
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from email.utils import formataddr
from typing import Optional, List
from abc import ABC, abstractmethod

from settlement_sam.config import Settings, settings as default_settings
from settlement_sam.core.exceptions import ExternalServiceError
from settlement_sam.models.client import Client
from settlement_sam.models.lead import Lead, Tiers
from settlement_sam.services.estimator import format_currency

logger = logging.getLogger(__name__)

INJURY_LABELS = {
    "soft_tissue": "Soft Tissue (Sprains / Whiplash)",
    "fracture": "Broken Bone / Fracture",
    "tbi": "Head Injury / TBI",
    "spinal": "Spinal Cord Injury",
    "other": "Other / Multiple",
}

TIER_EMOJI = {Tiers.HOT: "🔥", Tiers.WARM: "⭐", Tiers.COLD: "🧊"}


def _yes_no(value: bool) -> str:
    return "Yes" if value else "No"


class EmailService(ABC):
    """Base email service interface."""

    @abstractmethod
    async def send_email(
        self,
        to: str,
        subject: str,
        body: str,
        html: Optional[str] = None,
        from_name: Optional[str] = None
    ) -> bool:
        """Send an email. Raises ExternalServiceError when the transport fails."""
        pass

    async def send_lead_email(self, lead: Lead, client: Client) -> bool:
        """Send a full lead profile to the client's registered address."""
        emoji = TIER_EMOJI.get(lead.tier, "")
        estimate = f"{format_currency(lead.estimate_low)} – {format_currency(lead.estimate_high)}"
        wages = format_currency(lead.lost_wages) if lead.lost_wages > 0 else "$0"
        injury = INJURY_LABELS.get(lead.injury_type, lead.injury_type)

        subject = f"{emoji} New {lead.tier} Lead — {lead.name} | Settlement Sam"
        body = (
            f"New {lead.tier} Lead: {lead.name} | Phone: {lead.phone} | "
            f"Estimate: {estimate} | Score: {lead.score}/150"
        )

        html = f"""
        <html>
        <body style="font-family: Arial, sans-serif; background: #FDF6E9;">
            <h2 style="color: #2C3E35;">Settlement Sam</h2>
            <p><strong>{emoji} {lead.tier} Lead — Score {lead.score}/150</strong></p>
            <h3>{lead.name}</h3>
            <p>Phone: <strong>{lead.phone}</strong></p>
            <p>Source: {lead.source} • Verified {lead.created_at:%Y-%m-%d %H:%M} UTC</p>
            <table cellpadding="4">
                <tr><td>Injury Type</td><td>{injury}</td></tr>
                <tr><td>Surgery</td><td>{_yes_no(lead.surgery)}</td></tr>
                <tr><td>Hospitalized</td><td>{_yes_no(lead.hospitalized)}</td></tr>
                <tr><td>In Treatment</td><td>{_yes_no(lead.still_in_treatment)}</td></tr>
                <tr><td>Missed Work</td><td>{_yes_no(lead.missed_work)}</td></tr>
                <tr><td>Lost Wages</td><td>{wages}</td></tr>
            </table>
            <p>Estimated Case Value: <strong>{estimate}</strong></p>
            <p><small>This lead was submitted via Settlement Sam and verified via SMS.
            Estimate is based on general settlement data and is not legal advice.</small></p>
            <p><small>Confidential lead report for {client.firm}. Do not forward.</small></p>
        </body>
        </html>
        """

        return await self.send_email(
            client.email, subject, body, html, from_name="Settlement Sam Leads"
        )


class MockEmailService(EmailService):
    """
    Mock email service for development.
    Logs emails instead of sending and keeps them for tests.
    """

    def __init__(self):
        self.sent_emails: List[dict] = []

    async def send_email(
        self,
        to: str,
        subject: str,
        body: str,
        html: Optional[str] = None,
        from_name: Optional[str] = None
    ) -> bool:
        """Mock send - logs and stores for debugging."""
        self.sent_emails.append({
            "to": to,
            "subject": subject,
            "body": body,
            "html": html
        })
        logger.info("MOCK EMAIL to=%s subject=%r body=%r", to, subject, body[:120])
        return True

    def get_last_email(self) -> Optional[dict]:
        """Get the last sent email (for testing)."""
        return self.sent_emails[-1] if self.sent_emails else None


class SMTPEmailService(EmailService):
    """
    SMTP email service for production.
    Configure with environment variables:
    - SMTP_HOST
    - SMTP_PORT
    - SMTP_USER
    - SMTP_PASSWORD
    - EMAIL_FROM
    """

    def __init__(self, settings: Settings = default_settings):
        self.host = settings.SMTP_HOST or "smtp.gmail.com"
        self.port = settings.SMTP_PORT
        self.user = settings.SMTP_USER
        self.password = settings.SMTP_PASSWORD
        self.from_email = settings.EMAIL_FROM
        self.from_name = settings.EMAIL_FROM_NAME

    def _send(self, to: str, msg: MIMEMultipart) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=30) as server:
            server.starttls()
            if self.user and self.password:
                server.login(self.user, self.password)
            server.sendmail(self.from_email, to, msg.as_string())

    async def send_email(
        self,
        to: str,
        subject: str,
        body: str,
        html: Optional[str] = None,
        from_name: Optional[str] = None
    ) -> bool:
        """Send email via SMTP."""
        msg = MIMEMultipart('alternative')
        msg['Subject'] = subject
        msg['From'] = formataddr((from_name or self.from_name, self.from_email))
        msg['To'] = to

        msg.attach(MIMEText(body, 'plain'))
        if html:
            msg.attach(MIMEText(html, 'html'))

        try:
            # smtplib blocks
            await asyncio.to_thread(self._send, to, msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send email to %s: %s", to, e)
            raise ExternalServiceError("SMTP", str(e)) from e

        logger.info("Email sent to %s: %s", to, subject)
        return True


# =============================================================================
# EMAIL SERVICE SINGLETON
# =============================================================================

_email_service: Optional[EmailService] = None


def get_email_service() -> EmailService:
    """Get the email service instance."""
    global _email_service

    if _email_service is None:
        if default_settings.SMTP_HOST:
            logger.info("Using SMTP Email Service")
            _email_service = SMTPEmailService()
        else:
            logger.info("Using Mock Email Service (emails logged, not sent)")
            _email_service = MockEmailService()

    return _email_service


def set_email_service(service: Optional[EmailService]) -> None:
    """Set custom email service (for testing)."""
    global _email_service
    _email_service = service
