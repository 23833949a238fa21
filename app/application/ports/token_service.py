from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass
class TokenClaims:
    phone: str
    user_id: Optional[int]
    role: Optional[str] = None


class TokenService(Protocol):
    def issue(self, phone: str, user_id: int, role: str) -> str:
        ...

    def resolve(self, token: str) -> Optional[TokenClaims]:
        """Return the claims of a valid token, None for anything else."""
        ...
