"""Admin CRUD over the preferences table. Every write reloads the shared cache."""

import logging

from sqlalchemy.orm import Session

from app.models import Preference
from app.schemas.preference import (
    PreferenceBulkItem,
    PreferenceCreate,
    PreferenceOut,
    PreferencesListResponse,
)
from app.services.errors import Conflict, NotFound
from app.services.preferences import PreferenceCache

logger = logging.getLogger(__name__)


def list_preferences(db: Session) -> PreferencesListResponse:
    rows = (
        db.query(Preference)
        .order_by(Preference.category, Preference.sort, Preference.key)
        .all()
    )
    return PreferencesListResponse(data=[PreferenceOut.model_validate(r) for r in rows], total=len(rows))


def _find(db: Session, key: str, domain: str) -> Preference | None:
    return db.query(Preference).filter(Preference.key == key, Preference.domain == domain).first()


def get_preference(db: Session, key: str, domain: str) -> Preference:
    row = _find(db, key, domain)
    if row is None:
        raise NotFound(f"Preference {domain}:{key} not found.")
    return row


def create_preference(db: Session, cache: PreferenceCache, body: PreferenceCreate) -> Preference:
    if _find(db, body.key, body.domain) is not None:
        raise Conflict(f"Preference {body.domain}:{body.key} already exists.")
    row = Preference(**body.model_dump())
    db.add(row)
    db.commit()
    db.refresh(row)
    cache.load()
    return row


def update_preference(
    db: Session, cache: PreferenceCache, key: str, domain: str, value: str
) -> Preference:
    """Value-only update written through the cache."""
    cache.update(key, value, domain)
    db.expire_all()
    return get_preference(db, key, domain)


def update_preferences(cache: PreferenceCache, items: list[PreferenceBulkItem]) -> int:
    cache.update_many([item.model_dump() for item in items])
    return len(items)


def delete_preference(db: Session, cache: PreferenceCache, key: str, domain: str) -> None:
    row = get_preference(db, key, domain)
    db.delete(row)
    db.commit()
    cache.load()
    logger.info("Preference deleted: %s:%s", domain, key)
