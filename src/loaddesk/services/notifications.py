"""Owner notifications over email (SMTP) and SMS (Twilio REST)."""

from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Optional

import httpx

from ..config import Settings
from ..errors import NotificationError

logger = logging.getLogger(__name__)

SMS_MAX_LENGTH = 320


@dataclass(slots=True)
class NotificationResult:
    success: bool
    detail: str = ""


@dataclass(slots=True)
class LoadNotification:
    """Owner-facing digest of a freshly created load request."""

    load_id: str
    customer_name: str
    customer_phone: Optional[str]
    route: str
    cargo_type: str
    weight: str
    truck_type: str
    deadline: Optional[str]
    summary: str


def render_owner_email(notification: LoadNotification, approve_url: str, reject_url: str) -> tuple[str, str]:
    subject = f"New Load Request {notification.load_id} - {notification.customer_name}"
    body = "\n".join(
        [
            "A new load request needs your approval.",
            "",
            f"Load ID: {notification.load_id}",
            f"Customer: {notification.customer_name}",
            f"Phone: {notification.customer_phone or 'not provided'}",
            f"Route: {notification.route}",
            f"Cargo: {notification.cargo_type}",
            f"Weight: {notification.weight}",
            f"Truck: {notification.truck_type}",
            f"Deadline: {notification.deadline or 'not specified'}",
            "",
            "Summary:",
            notification.summary,
            "",
            f"Approve: {approve_url}",
            f"Reject: {reject_url}",
        ]
    )
    return subject, body


def render_owner_sms(load_id: str, customer_name: str, route: str) -> str:
    message = f"New load {load_id} from {customer_name}: {route}. Check your email to approve or reject."
    return message[:SMS_MAX_LENGTH]


class EmailSender:
    def __init__(self, config: Settings) -> None:
        self.host = config.smtp_host
        self.port = config.smtp_port
        self.username = config.smtp_username
        self.password = config.smtp_password
        self.from_address = config.smtp_from_address or config.smtp_username

    @property
    def enabled(self) -> bool:
        return bool(self.host and self.username and self.password)

    def send(self, recipient: str, subject: str, body: str) -> NotificationResult:
        if not self.enabled:
            logger.info(f"SMTP not configured - email to {recipient} not sent: {subject}")
            return NotificationResult(False, "SMTP not configured")

        message = EmailMessage()
        message["From"] = self.from_address
        message["To"] = recipient
        message["Subject"] = subject
        message.set_content(body)

        try:
            with smtplib.SMTP(self.host, self.port, timeout=30) as server:
                server.starttls()
                server.login(self.username, self.password)
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            logger.exception(f"Failed to send SMTP email to {recipient}")
            return NotificationResult(False, f"SMTP failure: {exc}")
        return NotificationResult(True, "Email delivered via SMTP")


class SMSSender:
    def __init__(self, config: Settings, http_client: httpx.Client | None = None) -> None:
        self.account_sid = config.twilio_account_sid
        self.auth_token = config.twilio_auth_token
        self.from_number = config.twilio_phone_number
        self.api_base_url = config.twilio_api_base_url.rstrip("/")
        self._http_client = http_client

    @property
    def enabled(self) -> bool:
        return bool(self.account_sid and self.auth_token and self.from_number)

    def send(self, recipient: str, body: str) -> NotificationResult:
        if not self.enabled:
            logger.info(f"SMS would be sent to {recipient}: {body}")
            return NotificationResult(False, "Twilio credentials not configured")

        url = f"{self.api_base_url}/2010-04-01/Accounts/{self.account_sid}/Messages.json"
        data = {"To": recipient, "From": self.from_number, "Body": body}
        client = self._http_client or httpx.Client(timeout=10.0)
        try:
            response = client.post(url, data=data, auth=(self.account_sid, self.auth_token))
        except httpx.HTTPError as exc:
            logger.error(f"Twilio SMS request failed: {exc}")
            return NotificationResult(False, f"Twilio failure: {exc}")
        finally:
            if self._http_client is None:
                client.close()

        if response.status_code in (200, 201):
            sid = response.json().get("sid", "")
            logger.info(f"SMS sent to {recipient}, Message SID: {sid}")
            return NotificationResult(True, "SMS accepted by Twilio")
        logger.error(f"Twilio SMS failed with status {response.status_code}: {response.text}")
        return NotificationResult(False, f"Twilio failure: {response.text}")


class NotificationDispatcher:
    """Sends the owner email and SMS. Each channel succeeds or fails on its own."""

    def __init__(self, email: EmailSender, sms: SMSSender) -> None:
        self.email = email
        self.sms = sms

    def send_owner_notification(
        self,
        destination: str,
        notification: LoadNotification,
        approve_url: str,
        reject_url: str,
    ) -> NotificationResult:
        if not destination:
            raise NotificationError(f"No owner email configured for {notification.load_id}")
        subject, body = render_owner_email(notification, approve_url, reject_url)
        result = self.email.send(destination, subject, body)
        if result.success:
            logger.info(f"Owner notification for {notification.load_id} emailed to {destination}")
        return result

    def send_owner_sms(self, destination: str, load_id: str, customer_name: str, route: str) -> NotificationResult:
        if not destination:
            raise NotificationError(f"No owner phone configured for {load_id}")
        return self.sms.send(destination, render_owner_sms(load_id, customer_name, route))
