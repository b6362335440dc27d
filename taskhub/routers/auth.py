import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from taskhub.schemas.user import UserCreate, UserLogin, UserOut, TokenOut
from taskhub.models.user import User
from taskhub.utils.auth import hash_password, verify_password, create_token
from taskhub.database import get_db
from taskhub.errors import AuthenticationError, ConflictError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

# one message for unknown user and wrong password, so usernames cannot be probed
INVALID_CREDENTIALS = "Invalid credentials"

@router.post("/signup", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def signup(user: UserCreate, db: Session = Depends(get_db)):
    if db.query(User).filter(User.username == user.username).first():
        raise ConflictError("Username already taken")
    if db.query(User).filter(User.email == user.email).first():
        raise ConflictError("Email already registered")

    # the 72-byte bcrypt limit is already enforced by UserCreate
    new_user = User(username=user.username, email=user.email, password=hash_password(user.password))
    db.add(new_user)
    try:
        db.commit()
    except IntegrityError:
        # lost a race against a concurrent signup with the same username/email
        db.rollback()
        raise ConflictError("Username or email already exists")
    db.refresh(new_user)
    logger.info("Registered user %s (id=%s)", new_user.username, new_user.id)
    return new_user

@router.post("/login", response_model=TokenOut)
def login(user: UserLogin, db: Session = Depends(get_db)):
    db_user = db.query(User).filter(User.username == user.username).first()
    if not db_user or not verify_password(user.password, db_user.password):
        logger.info("Failed login for username %r", user.username)
        raise AuthenticationError(INVALID_CREDENTIALS)

    return TokenOut(token=create_token(db_user.id, db_user.username))
