"""User API routes."""
import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from lunchplan.database import get_db
from lunchplan.errors import conflict
from lunchplan.models.user import User
from lunchplan.schemas.user import UserCreate, UserUpdate, UserOut
from lunchplan.services import directory

logger = logging.getLogger(__name__)
router = APIRouter()


def _ensure_email_free(db: Session, email: str, user_id: str | None = None) -> None:
    query = db.query(User).filter(User.email == email)
    if user_id:
        query = query.filter(User.user_id != user_id)
    if query.first():
        raise conflict("Email is already registered", "email")


@router.post("/", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    """Create a new user."""
    _ensure_email_free(db, payload.email)
    user = User(**payload.model_dump())
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Created user %s (%s)", user.user_id, user.name)
    return user


@router.get("/", response_model=list[UserOut])
def list_users(db: Session = Depends(get_db)):
    """List all users by name."""
    return db.query(User).order_by(User.name).all()


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: str, db: Session = Depends(get_db)):
    """Fetch a single user by ID."""
    return directory.get_user(db, user_id)


@router.patch("/{user_id}", response_model=UserOut)
def update_user(user_id: str, payload: UserUpdate, db: Session = Depends(get_db)):
    """Update a user's profile (partial update)."""
    user = directory.get_user(db, user_id)
    updates = payload.model_dump(exclude_unset=True)
    if "email" in updates:
        _ensure_email_free(db, updates["email"], user_id)
    for field, value in updates.items():
        setattr(user, field, value)
    db.commit()
    db.refresh(user)
    logger.info("Updated user %s", user_id)
    return user
