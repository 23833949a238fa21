from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol


@dataclass
class OtpRecordDto:
    phone: str
    code_hash: str
    expires_at: datetime
    attempts: int = 0
    consumed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class OtpRepository(Protocol):
    def get(self, phone: str) -> Optional[OtpRecordDto]:
        ...

    def put(self, phone: str, code_hash: str, expires_at: datetime) -> OtpRecordDto:
        """Create or replace the single outstanding record for a phone."""
        ...

    def delete(self, phone: str, code_hash: Optional[str] = None) -> None:
        """Remove the record; with `code_hash`, only if it still holds that code."""
        ...

    def record_failed_attempt(self, phone: str, code_hash: str, max_attempts: int) -> bool:
        """Atomically count a wrong guess while fewer than `max_attempts` are recorded.

        Returns False when the cap was already reached or the record no longer
        holds `code_hash`.
        """
        ...

    def consume(self, phone: str, code_hash: str, now: datetime, max_attempts: int) -> bool:
        """Atomically mark a pending, unexpired record under the attempt cap consumed.

        Returns False when no row matched, i.e. another caller consumed it first.
        """
        ...
