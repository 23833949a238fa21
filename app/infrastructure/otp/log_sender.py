import logging

from ...application.ports.otp_sender import OtpSender

logger = logging.getLogger(__name__)


class LogOtpSender(OtpSender):
    """Development sender: records that a code went out without delivering it."""

    def __init__(self) -> None:
        self.sent_count = 0

    def send(self, phone: str, code: str) -> None:
        self.sent_count += 1
        logger.info(f"OTP generated for phone ending {phone[-4:]} (SMS delivery disabled)")
