"""
Overlay Store

Durable client-side journal of every mutation the user attempted. Reads from
the backend are patched with it, so a stage move the backend dropped (or
never received) still shows up after a reload.

Storage is a small SQLite file accessed synchronously: a write has landed by
the time ``record`` returns. Storage failures are logged and swallowed; the
overlay is best-effort and must never break a user flow.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Optional, TypeVar

from pydantic import BaseModel
from sqlalchemy import Engine, delete, select
from sqlalchemy.exc import SQLAlchemyError

from core.errors import DurableLocalError
from database.engine import create_local_engine, init_local_db
from database.models.overlay import SINGLE_VALUE_KINDS, OverlayKind, OverlayRecord

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

# Failures the overlay absorbs instead of propagating
LOCAL_STORAGE_ERRORS = (SQLAlchemyError, OSError, DurableLocalError)


def _as_naive_utc(value: Optional[datetime]) -> datetime:
    if value is None:
        return datetime.now(timezone.utc).replace(tzinfo=None)
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _kind_value(kind: OverlayKind | str) -> str:
    return kind.value if isinstance(kind, OverlayKind) else str(kind)


class OverlayStore:
    """
    Local overlay of user intent over authoritative backend data.

    Args:
        db_path: SQLite file path, or ``":memory:"``; defaults to settings
        engine: Pre-built engine (takes precedence over ``db_path``)
    """

    def __init__(self, db_path: Optional[str] = None, engine: Optional[Engine] = None):
        self.engine = engine
        self._session_factory = None
        try:
            if self.engine is None:
                self.engine = create_local_engine(db_path)
            self._session_factory = init_local_db(self.engine)
        except LOCAL_STORAGE_ERRORS as exc:
            logger.error(f"Overlay storage unavailable, continuing without it: {exc}")

    @property
    def available(self) -> bool:
        return self._session_factory is not None

    def _session(self):
        if self._session_factory is None:
            raise DurableLocalError("Overlay storage is not available")
        return self._session_factory()

    def record(
        self,
        entity_id: str,
        kind: OverlayKind | str,
        payload: dict[str, Any],
        written_at: Optional[datetime] = None,
    ) -> Optional[OverlayRecord]:
        """
        Persist one user-intended write.

        Single-value kinds keep only the newest record per entity; a write
        older than the stored one is dropped. Other kinds are appended.

        Returns:
            The stored record, or None if the write was dropped or failed
        """
        kind_value = _kind_value(kind)
        stamp = _as_naive_utc(written_at)

        try:
            with self._session() as session, session.begin():
                if kind_value in SINGLE_VALUE_KINDS:
                    existing = session.scalars(
                        select(OverlayRecord).where(
                            OverlayRecord.kind == kind_value,
                            OverlayRecord.entity_id == entity_id,
                        )
                    ).all()
                    if any(row.written_at > stamp for row in existing):
                        logger.info(
                            f"Dropping stale {kind_value} overlay for {entity_id}"
                        )
                        return None
                    for row in existing:
                        session.delete(row)

                record = OverlayRecord(
                    kind=kind_value,
                    entity_id=entity_id,
                    payload=dict(payload),
                    written_at=stamp,
                )
                session.add(record)
            return record
        except LOCAL_STORAGE_ERRORS as exc:
            logger.error(f"Failed to persist {kind_value} overlay for {entity_id}: {exc}")
            return None

    def read_all(self, kind: OverlayKind | str) -> dict[str, dict[str, Any]]:
        """Most recent payload per entity for ``kind``."""
        kind_value = _kind_value(kind)
        try:
            with self._session() as session:
                rows = session.scalars(
                    select(OverlayRecord)
                    .where(OverlayRecord.kind == kind_value)
                    .order_by(OverlayRecord.written_at, OverlayRecord.id)
                ).all()
        except LOCAL_STORAGE_ERRORS as exc:
            logger.error(f"Failed to read {kind_value} overlay: {exc}")
            return {}
        return {row.entity_id: dict(row.payload) for row in rows}

    def read_notes(self, candidate_id: Optional[str] = None) -> list[dict[str, Any]]:
        """Journal of note attempts, oldest first."""
        query = select(OverlayRecord).where(OverlayRecord.kind == OverlayKind.NOTE.value)
        if candidate_id is not None:
            query = query.where(OverlayRecord.entity_id == candidate_id)
        try:
            with self._session() as session:
                rows = session.scalars(
                    query.order_by(OverlayRecord.written_at, OverlayRecord.id)
                ).all()
        except LOCAL_STORAGE_ERRORS as exc:
            logger.error(f"Failed to read note overlay: {exc}")
            return []
        return [dict(row.payload) for row in rows]

    def stage_overrides(self) -> dict[str, str]:
        """``candidate_id -> stage`` for every persisted stage move."""
        overrides = self.read_all(OverlayKind.STAGE_OVERRIDE)
        return {
            entity_id: payload["stage"]
            for entity_id, payload in overrides.items()
            if "stage" in payload
        }

    def apply(
        self,
        entities: Iterable[M],
        kind: OverlayKind | str = OverlayKind.STAGE_OVERRIDE,
        field: str = "stage",
    ) -> list[M]:
        """
        Patch ``field`` of each entity with its overlay value when present.

        Entities without an overlay record are returned unchanged.
        """
        overrides = self.read_all(kind)
        patched = []
        for entity in entities:
            payload = overrides.get(entity.id)
            if payload is not None and field in payload:
                entity = entity.model_copy(update={field: payload[field]})
            patched.append(entity)
        return patched

    def reset(
        self,
        kind: OverlayKind | str | None = None,
        entity_id: Optional[str] = None,
    ) -> int:
        """Delete overlay records; returns how many were removed."""
        query = delete(OverlayRecord)
        if kind is not None:
            query = query.where(OverlayRecord.kind == _kind_value(kind))
        if entity_id is not None:
            query = query.where(OverlayRecord.entity_id == entity_id)
        try:
            with self._session() as session, session.begin():
                result = session.execute(query)
            return result.rowcount or 0
        except LOCAL_STORAGE_ERRORS as exc:
            logger.error(f"Failed to reset overlay: {exc}")
            return 0

    def close(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
