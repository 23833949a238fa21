from typing import Protocol


class OtpSender(Protocol):
    def send(self, phone: str, code: str) -> None:
        ...
