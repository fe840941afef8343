"""Admin preference endpoints. Writes go through the shared cache."""

from typing import Annotated

from fastapi import APIRouter, Query, Request, status

from app.api.deps import AdminUser, DbSession, Preferences
from app.core.config import settings
from app.models import ActivityAction
from app.schemas.preference import (
    PreferenceBulkUpdate,
    PreferenceCacheStats,
    PreferenceCreate,
    PreferenceOut,
    PreferencesListResponse,
    PreferenceValueUpdate,
    PublicPreferences,
)
from app.schemas.user import MessageResponse
from app.services import activity_log, admin_preferences

router = APIRouter()

Domain = Annotated[str | None, Query(max_length=255)]


@router.get("", response_model=PreferencesListResponse)
def list_preferences(_admin: AdminUser, db: DbSession) -> PreferencesListResponse:
    return admin_preferences.list_preferences(db)


@router.get("/stats", response_model=PreferenceCacheStats)
def cache_stats(_admin: AdminUser, cache: Preferences) -> PreferenceCacheStats:
    return PreferenceCacheStats(**cache.get_stats())


@router.get("/values", response_model=PublicPreferences)
def cached_values(_admin: AdminUser, cache: Preferences, domain: Domain = None) -> PublicPreferences:
    """Parsed values for one domain as the cache currently serves them."""
    domain = domain or settings.DEFAULT_DOMAIN
    return PublicPreferences(domain=domain, values=cache.get_by_domain(domain))


@router.post("/reload", response_model=PreferenceCacheStats)
def reload_cache(_admin: AdminUser, cache: Preferences) -> PreferenceCacheStats:
    cache.refresh()
    return PreferenceCacheStats(**cache.get_stats())


@router.post("", response_model=PreferenceOut, status_code=status.HTTP_201_CREATED)
def create_preference(
    body: PreferenceCreate, request: Request, admin: AdminUser, db: DbSession, cache: Preferences
) -> PreferenceOut:
    row = admin_preferences.create_preference(db, cache, body)
    activity_log.log(
        db,
        ActivityAction.PREFERENCE_UPDATE,
        request,
        actor=admin,
        target_type="preference",
        target_id=row.id,
        target_name=f"{row.domain}:{row.key}",
        message="created",
    )
    return PreferenceOut.model_validate(row)


@router.put("/bulk", response_model=MessageResponse)
def bulk_update(
    body: PreferenceBulkUpdate, request: Request, admin: AdminUser, db: DbSession, cache: Preferences
) -> MessageResponse:
    """All listed values are written in one transaction or none are."""
    count = admin_preferences.update_preferences(cache, body.updates)
    activity_log.log(
        db,
        ActivityAction.PREFERENCE_UPDATE,
        request,
        actor=admin,
        target_type="preference",
        metadata={"keys": [f"{item.domain}:{item.key}" for item in body.updates]},
    )
    return MessageResponse(message=f"Updated {count} preferences.")


@router.put("/{key}", response_model=PreferenceOut)
def update_preference(
    key: str,
    body: PreferenceValueUpdate,
    request: Request,
    admin: AdminUser,
    db: DbSession,
    cache: Preferences,
    domain: Domain = None,
) -> PreferenceOut:
    row = admin_preferences.update_preference(db, cache, key, domain or settings.DEFAULT_DOMAIN, body.value)
    activity_log.log(
        db,
        ActivityAction.PREFERENCE_UPDATE,
        request,
        actor=admin,
        target_type="preference",
        target_id=row.id,
        target_name=f"{row.domain}:{row.key}",
    )
    return PreferenceOut.model_validate(row)


@router.delete("/{key}", response_model=MessageResponse)
def delete_preference(
    key: str,
    request: Request,
    admin: AdminUser,
    db: DbSession,
    cache: Preferences,
    domain: Domain = None,
) -> MessageResponse:
    domain = domain or settings.DEFAULT_DOMAIN
    admin_preferences.delete_preference(db, cache, key, domain)
    activity_log.log(
        db,
        ActivityAction.PREFERENCE_UPDATE,
        request,
        actor=admin,
        target_type="preference",
        target_name=f"{domain}:{key}",
        message="deleted",
    )
    return MessageResponse(message="Preference deleted.")
