"""User API routes."""
import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from gamenight.database import get_db
from gamenight.models.game import Game, GameCollection
from gamenight.models.user import User
from gamenight.schemas.user import UserCreate, UserUpdate, UserOut, CollectionEntryIn, CollectionEntryOut
from gamenight.services.catalog_service import CatalogClient, CatalogError, get_catalog_client, sync_collection
from gamenight.services.errors import conflict, not_found, upstream_error, validation_error

logger = logging.getLogger(__name__)
router = APIRouter()


def _get_user(db: Session, user_id: str) -> User:
    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        raise not_found("User")
    return user


@router.post("/", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    """Create a new user."""
    if db.query(User).filter(User.email == payload.email).first():
        raise conflict("email_taken", "A user with this email already exists.")
    user = User(**payload.model_dump())
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Created user %s (%s)", user.user_id, user.name)
    return user


@router.get("/", response_model=list[UserOut])
def list_users(db: Session = Depends(get_db)):
    """List all users."""
    return db.query(User).all()


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: str, db: Session = Depends(get_db)):
    """Fetch a single user by ID."""
    return _get_user(db, user_id)


@router.patch("/{user_id}", response_model=UserOut)
def update_user(user_id: str, payload: UserUpdate, db: Session = Depends(get_db)):
    """Update user details (partial update)."""
    user = _get_user(db, user_id)
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(user, field, value)
    db.commit()
    db.refresh(user)
    logger.info("Updated user %s", user_id)
    return user


@router.put("/{user_id}/collection/{catalog_id}", response_model=CollectionEntryOut)
def put_collection_entry(
    user_id: str, catalog_id: int, payload: CollectionEntryIn, db: Session = Depends(get_db),
):
    """Record that a user owns / rates a game."""
    _get_user(db, user_id)
    if not db.query(Game).filter(Game.catalog_id == catalog_id).first():
        raise not_found("Game")
    entry = (
        db.query(GameCollection)
        .filter(GameCollection.user_id == user_id, GameCollection.catalog_id == catalog_id)
        .first()
    )
    if entry is None:
        entry = GameCollection(user_id=user_id, catalog_id=catalog_id)
        db.add(entry)
    for field, value in payload.model_dump().items():
        setattr(entry, field, value)
    db.commit()
    db.refresh(entry)
    return entry


@router.get("/{user_id}/collection", response_model=list[CollectionEntryOut])
def list_collection(user_id: str, db: Session = Depends(get_db)):
    _get_user(db, user_id)
    return db.query(GameCollection).filter(GameCollection.user_id == user_id).all()


@router.post("/{user_id}/collection/sync", response_model=list[CollectionEntryOut])
def sync_user_collection(
    user_id: str,
    db: Session = Depends(get_db),
    catalog: CatalogClient = Depends(get_catalog_client),
):
    """Mirror the user's external catalog collection into their local collection."""
    user = _get_user(db, user_id)
    if not user.catalog_username:
        raise validation_error("missing_catalog_username", "Set a catalog username before syncing.")
    try:
        return sync_collection(db, catalog, user)
    except CatalogError as exc:
        raise upstream_error("catalog_unavailable", str(exc)) from exc
