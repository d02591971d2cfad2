"""
Overlay Records

Client-local journal of mutations the user attempted (stage moves, notes).
Lives in the dashboard's own SQLite file, never on the backend.
"""

from datetime import datetime
from enum import Enum as PyEnum
from typing import Any

from sqlalchemy import JSON, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from database.engine import LocalBase


class OverlayKind(str, PyEnum):
    """What an overlay record overrides."""

    STAGE_OVERRIDE = "stage-override"
    NOTE = "note"


# Kinds that keep only the latest record per entity; the rest are append-only
SINGLE_VALUE_KINDS = frozenset({OverlayKind.STAGE_OVERRIDE.value})


class OverlayRecord(LocalBase):
    """One user-intended write, keyed by ``(kind, entity_id)``."""

    __tablename__ = "overlay_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    kind: Mapped[str] = mapped_column(String(32), nullable=False)
    entity_id: Mapped[str] = mapped_column(String(128), nullable=False)
    payload: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    # Naive UTC; SQLite keeps no offset
    written_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    __table_args__ = (
        Index("idx_overlay_kind_entity", "kind", "entity_id"),
    )

    def __repr__(self) -> str:
        return f"<OverlayRecord(kind={self.kind!r}, entity_id={self.entity_id!r})>"
