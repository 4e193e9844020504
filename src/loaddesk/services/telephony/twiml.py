"""TwiML documents returned to Twilio webhooks."""

from __future__ import annotations

from twilio.twiml.messaging_response import MessagingResponse
from twilio.twiml.voice_response import VoiceResponse

LANGUAGE = "en-US"


def greeting_response(company_name: str, record_action_url: str, *, voice: str, max_length: int) -> str:
    response = VoiceResponse()
    response.say(
        f"Thank you for calling {company_name}. I'm your AI assistant and I'll help you with your "
        "shipping request. Please describe your shipping needs including pickup location, delivery "
        "location, cargo type, and any special requirements. I'll be recording this call to process "
        "your request.",
        voice=voice,
        language=LANGUAGE,
    )
    response.record(transcribe=False, max_length=max_length, action=record_action_url, method="POST")
    return str(response)


def recording_ack_response(company_name: str, *, voice: str) -> str:
    response = VoiceResponse()
    response.say(
        f"Thank you for choosing {company_name}. I'm processing your information and will send the "
        "details to our dispatch team. You should receive a confirmation within 15 minutes for your "
        "expedited shipment. Have a great day!",
        voice=voice,
        language=LANGUAGE,
    )
    response.hangup()
    return str(response)


def sms_ack_response(company_name: str) -> str:
    response = MessagingResponse()
    response.message(
        "Thank you for your load request! We're processing your shipping details and will send them "
        f"to our dispatch team. You'll receive a confirmation within 15 minutes. - {company_name}"
    )
    return str(response)


def error_response(company_name: str, *, voice: str) -> str:
    response = VoiceResponse()
    response.say(
        f"We're sorry, {company_name} could not take your call right now. Please try again shortly.",
        voice=voice,
        language=LANGUAGE,
    )
    response.hangup()
    return str(response)
