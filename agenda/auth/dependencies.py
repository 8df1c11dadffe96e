import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from agenda.auth import jwt_handler
from agenda.auth.session import SessionContext
from agenda.core.errors import UnauthorizedError
from agenda.database import get_db
from agenda.models.user import User

security = HTTPBearer(auto_error=False)


def get_current_session(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> SessionContext:
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Missing bearer token.")

    token = credentials.credentials
    try:
        payload = jwt_handler.decode_access_token(token)
    except jwt.PyJWTError as exc:
        raise UnauthorizedError("Invalid token.") from exc

    session = SessionContext.from_claims(payload, token=token)

    user = db.query(User).filter(User.id == session.user_id).first()
    if user is None or user.email != session.email:
        raise UnauthorizedError("User not found.")
    return session
