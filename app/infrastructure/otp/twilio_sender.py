import logging
from typing import Optional

from twilio.rest import Client
from twilio.http.http_client import TwilioHttpClient
from twilio.base.exceptions import TwilioException

from ...config import settings
from ...application.ports.otp_sender import OtpSender
from ...exceptions import InternalError

logger = logging.getLogger(__name__)


def to_e164(phone: str, default_country_code: str) -> str:
    """Turn a stored digit string into E.164; a leading 0 marks a national number."""
    if phone.startswith("00"):
        return "+" + phone[2:]
    if phone.startswith("0"):
        return "+" + default_country_code + phone[1:]
    return "+" + phone


class TwilioOtpSender(OtpSender):
    def __init__(self, client: Optional[Client] = None, from_number: Optional[str] = None,
                 default_country_code: Optional[str] = None):
        self.client = client or Client(
            settings.TWILIO_ACCOUNT_SID,
            settings.TWILIO_AUTH_TOKEN,
            http_client=TwilioHttpClient(timeout=15, max_retries=3),
        )
        self.from_number = from_number or settings.TWILIO_FROM_NUMBER
        self.default_country_code = default_country_code or settings.SMS_DEFAULT_COUNTRY_CODE

    def send(self, phone: str, code: str) -> None:
        if not self.from_number:
            raise RuntimeError("TWILIO_FROM_NUMBER not configured")
        try:
            message = self.client.messages.create(
                to=to_e164(phone, self.default_country_code),
                from_=self.from_number,
                body=f"Your PremiumChat code is {code}",
            )
        except TwilioException as e:
            logger.error(f"Twilio SMS send failed: {type(e).__name__}")
            raise InternalError("Could not send OTP")
        logger.info(f"OTP SMS queued: {message.sid}")
