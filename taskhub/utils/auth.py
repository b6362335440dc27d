from datetime import datetime, timedelta, UTC
from typing import Optional

from fastapi import Depends, Header, Query
from jose import jwt, JWTError, ExpiredSignatureError
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from taskhub.config import SECRET_KEY, ALGORITHM
from taskhub.database import get_db
from taskhub.errors import AuthenticationError
from taskhub.models.user import User
from taskhub.schemas.user import CurrentUser

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str):
    """Hash a password after validating bcrypt's 72-byte limit.

    Raises ValueError if the UTF-8 encoding of the password exceeds 72 bytes.
    """
    if isinstance(password, str):
        b = password.encode("utf-8")
        if len(b) > 72:
            # make the failure explicit and consistent
            raise ValueError("password too long: must be at most 72 bytes when UTF-8 encoded")
    return pwd_context.hash(password)


def verify_password(plain, hashed):
    """Verify a plaintext password against a hash.

    If verification raises a ValueError (for example plain >72 bytes), return False
    to allow the caller to respond with an authentication failure instead of an error.
    """
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        return False


def create_token(user_id: int, username: str):
    # read expiry at call-time so tests (and runtime overrides) that modify
    # taskhub.config.ACCESS_TOKEN_EXPIRE_MINUTES take effect immediately
    import taskhub.config as _cfg
    expire = datetime.now(UTC) + timedelta(minutes=_cfg.ACCESS_TOKEN_EXPIRE_MINUTES)
    data = {"user_id": user_id, "username": username, "exp": int(expire.timestamp())}
    return jwt.encode(data, SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str) -> CurrentUser:
    try:
        # jwt.decode validates exp automatically
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except JWTError:
        raise AuthenticationError("Invalid token", status_code=403)

    user_id = payload.get("user_id")
    username = payload.get("username")
    if not isinstance(user_id, int) or not username:
        raise AuthenticationError("Invalid token: missing user", status_code=403)
    return CurrentUser(id=user_id, username=username)


def _extract_token(authorization: Optional[str], token_query: Optional[str]) -> Optional[str]:
    """Return token from Authorization header (Bearer ...) or token query param (compat).
    Header has precedence.
    """
    if authorization:
        parts = authorization.split()
        if len(parts) == 2 and parts[0].lower() == "bearer":
            return parts[1]
    return token_query


def get_current_user(
    authorization: Optional[str] = Header(None),
    token: Optional[str] = Query(None),
    db: Session = Depends(get_db),
) -> CurrentUser:
    tok = _extract_token(authorization, token)
    if not tok:
        raise AuthenticationError("Access denied. No token provided.")
    current = decode_token(tok)
    # a well-signed token can outlive its account
    if db.get(User, current.id) is None:
        raise AuthenticationError("Invalid token", status_code=403)
    return current
