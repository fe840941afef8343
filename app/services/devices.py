"""Device registry: one row per (user, platform, client uuid) holding the current refresh token."""

import logging
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from app.models import Device
from app.services.device_info import DeviceInfo

logger = logging.getLogger(__name__)

_METADATA_FIELDS = ("device_model", "os_version", "app_version", "user_agent")


def _apply_metadata(device: Device, metadata: DeviceInfo | None) -> None:
    if metadata is None:
        return
    for field in _METADATA_FIELDS:
        value = getattr(metadata, field)
        if value:
            setattr(device, field, value)


class DeviceRegistry:
    """Persistence operations on Device rows. Every write commits."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def upsert(
        self,
        user_id: int,
        platform: str,
        uuid: str,
        refresh_token: str | None,
        expires_at: datetime | None,
        metadata: DeviceInfo | None = None,
    ) -> Device:
        """Create the device row if absent, else overwrite its token, expiry and metadata."""
        device = (
            self.session.query(Device)
            .filter(
                Device.user_id == user_id,
                Device.platform == platform,
                Device.uuid == uuid,
            )
            .first()
        )
        if device is None:
            device = Device(
                user_id=user_id,
                platform=platform,
                uuid=uuid,
                domain=metadata.domain if metadata and metadata.domain else "default",
            )
            self.session.add(device)
        device.refresh_token = refresh_token
        device.token_expires_at = expires_at
        device.last_active_at = datetime.now(UTC)
        _apply_metadata(device, metadata)
        self.session.commit()
        self.session.refresh(device)
        return device

    def find_by_refresh_token(
        self,
        user_id: int,
        refresh_token: str,
        uuid: str | None = None,
        platform: str | None = None,
    ) -> Device | None:
        """Device whose stored token equals refresh_token exactly. Expiry is not checked here."""
        query = self.session.query(Device).filter(
            Device.user_id == user_id,
            Device.refresh_token == refresh_token,
        )
        if uuid is not None:
            query = query.filter(Device.uuid == uuid)
        if platform is not None:
            query = query.filter(Device.platform == platform)
        return query.first()

    def get_for_user(self, user_id: int, device_id: int) -> Device | None:
        return (
            self.session.query(Device)
            .filter(Device.id == device_id, Device.user_id == user_id)
            .first()
        )

    def find_by_uuid(self, user_id: int, uuid: str) -> Device | None:
        return (
            self.session.query(Device)
            .filter(Device.user_id == user_id, Device.uuid == uuid)
            .order_by(Device.last_active_at.desc())
            .first()
        )

    def most_recent(self, user_id: int) -> Device | None:
        """Most recently active device that still holds a refresh token."""
        return (
            self.session.query(Device)
            .filter(Device.user_id == user_id, Device.refresh_token.is_not(None))
            .order_by(Device.last_active_at.desc())
            .first()
        )

    def touch(self, device: Device, metadata: DeviceInfo | None = None) -> Device:
        """Bump last_active_at and refresh metadata."""
        device.last_active_at = datetime.now(UTC)
        _apply_metadata(device, metadata)
        self.session.commit()
        return device

    def clear_token(self, device: Device) -> None:
        """Single-device logout: drop the refresh token and its expiry."""
        device.refresh_token = None
        device.token_expires_at = None
        self.session.commit()

    def clear_all_for_user(self, user_id: int) -> int:
        """All-devices logout. Returns the number of rows whose token was cleared."""
        count = (
            self.session.query(Device)
            .filter(Device.user_id == user_id, Device.refresh_token.is_not(None))
            .update(
                {Device.refresh_token: None, Device.token_expires_at: None},
                synchronize_session=False,
            )
        )
        self.session.commit()
        return count

    def list_active(self, user_id: int, now: datetime | None = None) -> list[Device]:
        """Devices with a live refresh token, most recently active first."""
        now = now or datetime.now(UTC)
        return (
            self.session.query(Device)
            .filter(
                Device.user_id == user_id,
                Device.refresh_token.is_not(None),
                Device.token_expires_at > now,
            )
            .order_by(Device.last_active_at.desc())
            .all()
        )

    def purge_expired(self, now: datetime | None = None) -> int:
        """Clear refresh tokens whose expiry has passed. Idempotent."""
        now = now or datetime.now(UTC)
        count = (
            self.session.query(Device)
            .filter(
                Device.refresh_token.is_not(None),
                Device.token_expires_at <= now,
            )
            .update(
                {Device.refresh_token: None, Device.token_expires_at: None},
                synchronize_session=False,
            )
        )
        self.session.commit()
        if count > 0:
            logger.info("Purged expired device sessions: cutoff=%s, cleared=%s", now.isoformat(), count)
        return count
