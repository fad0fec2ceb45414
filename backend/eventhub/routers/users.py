"""User API routes."""
import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from eventhub.database import get_db
from eventhub.errors import ConflictError, NotFoundError
from eventhub.models.user import User, UserRole
from eventhub.schemas.user import UserCreate, UserOut
from eventhub.security import get_current_user

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    """Register a user in the directory; credentials live with the identity provider."""
    if db.query(User).filter(User.display_name == payload.display_name).first():
        raise ConflictError("display_name_taken", "Display name is already taken")
    user = User(display_name=payload.display_name, role=UserRole.user)
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Created user %s (%s)", user.user_id, user.display_name)
    return user


@router.get("/", response_model=list[UserOut])
def list_users(db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    """List all users."""
    return db.query(User).order_by(User.display_name).all()


@router.get("/me", response_model=UserOut)
def read_me(current_user: User = Depends(get_current_user)):
    return current_user


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: str, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    """Fetch a single user by ID."""
    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        raise NotFoundError("user_not_found", "User not found")
    return user
