"""SQLite database for identity key snapshots and key renames.

Both tables are append-only: rows are never updated or deleted, so every
historical key mapping stays inspectable.
"""

from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    DateTime,
    Integer,
    String,
    create_engine,
    func,
    select,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    Session,
    mapped_column,
    sessionmaker,
)

from api.settings import settings
from infra.planning.models import KeyRename, SubnetRef, Zone


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""

    pass


class IdentityKeyRecord(Base):
    """One (group, zone) -> key entry of a key snapshot."""

    __tablename__ = "identity_keys"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    network: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    snapshot: Mapped[int] = mapped_column(Integer, nullable=False)
    group_name: Mapped[str] = mapped_column(String(100), nullable=False)
    zone_index: Mapped[int] = mapped_column(Integer, nullable=False)
    zone_name: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    key: Mapped[str] = mapped_column(String(200), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


class KeyRenameRecord(Base):
    """Database model for identity key renames."""

    __tablename__ = "key_renames"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    network: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    old_key: Mapped[str] = mapped_column(String(200), nullable=False)
    new_key: Mapped[str] = mapped_column(String(200), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


class Database:
    """Identity store operations."""

    def __init__(self, database_url: str = "sqlite:///./netplan.db"):
        self.engine = create_engine(database_url, echo=False)
        self.SessionLocal = sessionmaker(bind=self.engine)
        Base.metadata.create_all(self.engine)

    def get_session(self) -> Session:
        return self.SessionLocal()

    # =========================================================================
    # KEY SNAPSHOTS
    # =========================================================================

    def _latest_snapshot(self, session: Session, network: str) -> Optional[int]:
        return session.scalar(
            select(func.max(IdentityKeyRecord.snapshot)).where(IdentityKeyRecord.network == network)
        )

    def latest_keys(self, network: str) -> dict[SubnetRef, str]:
        """Get the most recent key snapshot of a network."""
        with self.get_session() as session:
            snapshot = self._latest_snapshot(session, network)
            if snapshot is None:
                return {}
            records = (
                session.query(IdentityKeyRecord)
                .filter_by(network=network, snapshot=snapshot)
                .order_by(IdentityKeyRecord.id)
                .all()
            )
            return {
                (r.group_name, Zone(index=r.zone_index, name=r.zone_name)): r.key
                for r in records
            }

    def append_keys(self, network: str, keys: Mapping[SubnetRef, str]) -> None:
        """Append a new key snapshot."""
        with self.get_session() as session:
            snapshot = (self._latest_snapshot(session, network) or 0) + 1
            session.add_all(
                IdentityKeyRecord(
                    network=network,
                    snapshot=snapshot,
                    group_name=group_name,
                    zone_index=zone.index,
                    zone_name=zone.name,
                    key=key,
                )
                for (group_name, zone), key in keys.items()
            )
            session.commit()

    # =========================================================================
    # KEY RENAMES
    # =========================================================================

    def append_renames(self, network: str, renames: Sequence[KeyRename]) -> None:
        """Append key renames to the log."""
        with self.get_session() as session:
            session.add_all(
                KeyRenameRecord(network=network, old_key=old_key, new_key=new_key)
                for old_key, new_key in renames
            )
            session.commit()

    def list_renames(self, network: str) -> list[KeyRename]:
        """List key renames in the order they were logged."""
        return [KeyRename(r.old_key, r.new_key) for r in self.list_rename_records(network)]

    def list_rename_records(self, network: str) -> list[KeyRenameRecord]:
        with self.get_session() as session:
            return (
                session.query(KeyRenameRecord)
                .filter_by(network=network)
                .order_by(KeyRenameRecord.id)
                .all()
            )


# Global database instance
db = Database(settings.database_url)


def get_db() -> Database:
    """FastAPI dependency returning the database."""
    return db
