from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from taskhub.database import get_db
from taskhub.models.user import User
from taskhub.schemas.user import CurrentUser, UserSummary
from taskhub.utils.auth import get_current_user

router = APIRouter(prefix="/users", tags=["users"])

@router.get("", response_model=List[UserSummary])
def list_users(db: Session = Depends(get_db), user: CurrentUser = Depends(get_current_user)):
    """Usernames for mention and sharing pickers. Emails are not exposed."""
    return db.query(User).order_by(User.username).all()
