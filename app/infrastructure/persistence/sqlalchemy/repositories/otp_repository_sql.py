from datetime import datetime
from typing import Optional

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from .....utils import as_utc, utcnow
from .....db.models import OTPCode
from .....application.ports.otp_repo import OtpRepository, OtpRecordDto


class SqlOtpRepository(OtpRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, rec: OTPCode) -> OtpRecordDto:
        return OtpRecordDto(
            phone=rec.phone,
            code_hash=rec.code_hash,
            expires_at=as_utc(rec.expires_at),
            attempts=rec.attempts,
            consumed_at=as_utc(rec.consumed_at),
            created_at=as_utc(rec.created_at),
        )

    def get(self, phone: str) -> Optional[OtpRecordDto]:
        rec = self.session.exec(select(OTPCode).where(OTPCode.phone == phone)).first()
        return self._to_dto(rec) if rec else None

    def put(self, phone: str, code_hash: str, expires_at: datetime) -> OtpRecordDto:
        values = {
            "code_hash": code_hash,
            "expires_at": expires_at,
            "attempts": 0,
            "consumed_at": None,
            "created_at": utcnow(),
        }
        result = self.session.execute(update(OTPCode).where(OTPCode.phone == phone).values(**values))
        if result.rowcount == 0:
            self.session.add(OTPCode(phone=phone, **values))
            try:
                self.session.commit()
            except IntegrityError:
                # A concurrent request inserted first; last writer wins
                self.session.rollback()
                self.session.execute(update(OTPCode).where(OTPCode.phone == phone).values(**values))
                self.session.commit()
        else:
            self.session.commit()
        return OtpRecordDto(phone=phone, **values)

    def delete(self, phone: str, code_hash: Optional[str] = None) -> None:
        stmt = delete(OTPCode).where(OTPCode.phone == phone)
        if code_hash is not None:
            # Leave a record that a newer request has since put in place
            stmt = stmt.where(OTPCode.code_hash == code_hash)
        self.session.execute(stmt)
        self.session.commit()

    def record_failed_attempt(self, phone: str, code_hash: str, max_attempts: int) -> bool:
        result = self.session.execute(
            update(OTPCode)
            .where(
                OTPCode.phone == phone,
                OTPCode.code_hash == code_hash,
                OTPCode.attempts < max_attempts,
            )
            .values(attempts=OTPCode.attempts + 1)
        )
        self.session.commit()
        return result.rowcount == 1

    def consume(self, phone: str, code_hash: str, now: datetime, max_attempts: int) -> bool:
        # Single conditional UPDATE: concurrent verifies cannot both match
        result = self.session.execute(
            update(OTPCode)
            .where(
                OTPCode.phone == phone,
                OTPCode.code_hash == code_hash,
                OTPCode.consumed_at.is_(None),
                OTPCode.expires_at >= now,
                OTPCode.attempts < max_attempts,
            )
            .values(consumed_at=now)
        )
        self.session.commit()
        return result.rowcount == 1

    def purge_expired(self, now: Optional[datetime] = None) -> int:
        """Delete expired records; returns how many were removed."""
        result = self.session.execute(delete(OTPCode).where(OTPCode.expires_at < (now or utcnow())))
        self.session.commit()
        return result.rowcount
