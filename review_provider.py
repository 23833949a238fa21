#!/usr/bin/env python3
"""
Manual provider review script
Record an approve/reject decision for a provider's identity documents:

    python review_provider.py 03001234567 approved
"""
import os
import sys
from sqlmodel import Session

# Add the app directory to the path
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from app.database import engine
from app.db.models import VerificationStatus
from app.infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository
from app.utils import normalize_phone


def review_provider(phone: str, status: str) -> int:
    phone = normalize_phone(phone)
    status = VerificationStatus(status.lower()).value
    with Session(engine) as session:
        repo = SqlUserRepository(session)
        user = repo.get_by_phone(phone)
        if user is None:
            print(f"No user with phone {phone}")
            return 1
        profile = repo.set_verification_status(user.id, status)
        if profile is None:
            print(f"User {user.id} never submitted provider documents")
            return 1
        documents = repo.count_documents(user.id)
        print(f"Provider {user.id} is now {profile.verification_status} ({documents} submission(s) on file)")
    return 0


if __name__ == "__main__":
    if len(sys.argv) != 3 or sys.argv[2].lower() not in [s.value for s in VerificationStatus]:
        print("usage: review_provider.py <phone> <pending|approved|rejected>")
        sys.exit(2)
    sys.exit(review_provider(sys.argv[1], sys.argv[2]))
