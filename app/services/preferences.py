"""
In-memory preference cache.

A read replica of the preferences table: load() rebuilds every index from a
full scan and swaps them in under a lock, and every write goes to the database
first and then triggers a full load(). Typed getters never raise; a missing or
mismatched value falls back to the caller's default.
"""

import asyncio
import json
import logging
import threading
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from sqlalchemy.orm import Session

from app.models import Preference
from app.services.errors import NotFound

logger = logging.getLogger(__name__)

DEFAULT_DOMAIN = "default"
PREFERENCE_TYPES = ("string", "number", "boolean", "json", "array", "text")


@dataclass(frozen=True)
class PreferenceItem:
    """Detached snapshot of a preference row."""

    domain: str
    category: str
    key: str
    value: str | None
    type: str
    name: str | None
    sort: int
    comment: str | None

    @classmethod
    def from_row(cls, row: Preference) -> "PreferenceItem":
        return cls(
            domain=row.domain,
            category=row.category,
            key=row.key,
            value=row.value,
            type=row.type,
            name=row.name,
            sort=row.sort,
            comment=row.comment,
        )


@dataclass(frozen=True)
class _Snapshot:
    values: dict[str, Any]
    by_category: dict[str, dict[str, Any]]
    raw: dict[str, PreferenceItem]


def cache_key(key: str, domain: str = DEFAULT_DOMAIN) -> str:
    return f"{domain}:{key}"


def _split_list(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def parse_value(value: str | None, value_type: str) -> Any:
    """Convert the stored text to the declared type. Unparseable number/json values stay raw."""
    if value is None:
        return None
    if value_type == "number":
        try:
            number = float(value)
        except ValueError:
            logger.warning("Failed to parse number preference value: %r", value)
            return value
        return int(number) if number.is_integer() and "." not in value else number
    if value_type == "boolean":
        return value in ("true", "1")
    if value_type == "json":
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            logger.warning("Failed to parse json preference value: %r", value)
            return value
    if value_type == "array":
        return _split_list(value)
    return value


class PreferenceCache:
    """
    Preference lookups served from memory.

    Built once at startup and shared; session_factory opens a short-lived
    session for each load or write.
    """

    def __init__(self, session_factory: Callable[[], Session], enable_logging: bool = True) -> None:
        self._session_factory = session_factory
        self._enable_logging = enable_logging
        self._lock = threading.Lock()
        self._snapshot = _Snapshot(values={}, by_category={}, raw={})

    def load(self) -> None:
        """Full table scan; replaces the cache wholesale so deleted rows disappear."""
        session = self._session_factory()
        try:
            rows = (
                session.query(Preference)
                .order_by(Preference.category, Preference.sort, Preference.key)
                .all()
            )
            items = [PreferenceItem.from_row(row) for row in rows]
        finally:
            session.close()

        values: dict[str, Any] = {}
        by_category: dict[str, dict[str, Any]] = {}
        raw: dict[str, PreferenceItem] = {}
        for item in items:
            k = cache_key(item.key, item.domain)
            parsed = parse_value(item.value, item.type)
            values[k] = parsed
            raw[k] = item
            by_category.setdefault(item.category, {})[item.key] = parsed

        with self._lock:
            self._snapshot = _Snapshot(values=values, by_category=by_category, raw=raw)
        if self._enable_logging:
            logger.info("Loaded %s preferences into cache", len(items))

    def refresh(self) -> None:
        self.load()

    def _current(self) -> _Snapshot:
        with self._lock:
            return self._snapshot

    def get(self, key: str, domain: str = DEFAULT_DOMAIN) -> Any:
        return self._current().values.get(cache_key(key, domain))

    def has(self, key: str, domain: str = DEFAULT_DOMAIN) -> bool:
        return cache_key(key, domain) in self._current().values

    def get_string(self, key: str, domain: str = DEFAULT_DOMAIN, default: str = "") -> str:
        value = self.get(key, domain)
        if isinstance(value, str):
            return value
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float)):
            return str(value)
        return default

    def get_number(
        self, key: str, domain: str = DEFAULT_DOMAIN, default: int | float = 0
    ) -> int | float:
        value = self.get(key, domain)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return value
        return default

    def get_boolean(self, key: str, domain: str = DEFAULT_DOMAIN, default: bool = False) -> bool:
        value = self.get(key, domain)
        return value if isinstance(value, bool) else default

    def get_array(
        self, key: str, domain: str = DEFAULT_DOMAIN, default: list[str] | None = None
    ) -> list[str]:
        value = self.get(key, domain)
        if isinstance(value, list):
            return value
        if isinstance(value, str):
            return _split_list(value)
        return list(default) if default is not None else []

    def get_json(self, key: str, domain: str = DEFAULT_DOMAIN, default: Any = None) -> Any:
        value = self.get(key, domain)
        return default if value is None else value

    def get_by_category(self, category: str) -> dict[str, Any]:
        return dict(self._current().by_category.get(category, {}))

    def get_categories(self) -> list[str]:
        return list(self._current().by_category)

    def get_raw(self, key: str, domain: str = DEFAULT_DOMAIN) -> PreferenceItem | None:
        return self._current().raw.get(cache_key(key, domain))

    def get_by_domain(self, domain: str = DEFAULT_DOMAIN) -> dict[str, Any]:
        prefix = f"{domain}:"
        return {
            k[len(prefix):]: v
            for k, v in self._current().values.items()
            if k.startswith(prefix)
        }

    def get_stats(self) -> dict[str, Any]:
        snapshot = self._current()
        return {
            "total_items": len(snapshot.values),
            "categories": len(snapshot.by_category),
            "category_list": list(snapshot.by_category),
            "domains": sorted({item.domain for item in snapshot.raw.values()}),
        }

    def update(self, key: str, value: str, domain: str = DEFAULT_DOMAIN) -> None:
        """Write one value, then reload the whole cache."""
        session = self._session_factory()
        try:
            row = (
                session.query(Preference)
                .filter(Preference.key == key, Preference.domain == domain)
                .first()
            )
            if row is None:
                raise NotFound(f"Preference {domain}:{key} not found.")
            row.value = value
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

        self.load()
        if self._enable_logging:
            logger.info("Updated preference: %s", cache_key(key, domain))

    def update_many(self, updates: Iterable[Mapping[str, Any]]) -> None:
        """Write all values in one transaction (all or nothing), then reload the whole cache."""
        updates = list(updates)
        session = self._session_factory()
        try:
            for item in updates:
                domain = item.get("domain") or DEFAULT_DOMAIN
                row = (
                    session.query(Preference)
                    .filter(Preference.key == item["key"], Preference.domain == domain)
                    .first()
                )
                if row is None:
                    raise NotFound(f"Preference {domain}:{item['key']} not found.")
                row.value = item["value"]
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

        self.load()
        if self._enable_logging:
            logger.info("Updated %s preferences", len(updates))


async def run_auto_refresh(cache: PreferenceCache, interval_sec: float) -> None:
    """Reload the cache every interval_sec until cancelled. Failures are logged, not raised."""
    while True:
        await asyncio.sleep(interval_sec)
        try:
            await asyncio.to_thread(cache.refresh)
        except Exception:
            logger.exception("Preference cache auto refresh failed")
