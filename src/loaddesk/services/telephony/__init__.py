"""Telephony provider integration."""

from .client import TwilioClient
from .twiml import error_response, greeting_response, recording_ack_response, sms_ack_response

__all__ = [
    "TwilioClient",
    "error_response",
    "greeting_response",
    "recording_ack_response",
    "sms_ack_response",
]
