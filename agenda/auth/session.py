"""Explicit caller identity handed to every service call."""

from dataclasses import dataclass

from agenda.core.errors import UnauthorizedError


@dataclass(frozen=True)
class SessionContext:
    user_id: int
    email: str
    role: str
    token: str | None = None

    @classmethod
    def from_claims(cls, claims: dict, token: str | None = None) -> "SessionContext":
        user_id = claims.get("uid")
        email = claims.get("sub")
        if not isinstance(user_id, int) or not email:
            raise UnauthorizedError("Invalid token subject.")
        return cls(user_id=user_id, email=email, role=claims.get("role") or "USER", token=token)

    @property
    def authorization_header(self) -> dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}
