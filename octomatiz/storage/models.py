"""Key-value entry ORM model.

Each row holds one key of the landing-page store: ``landing:<slug>``
records, ``short:<code>`` mappings and ``views:<slug>`` counters.
"""

from datetime import datetime

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from octomatiz.db import Base


class KVEntry(Base):
    """ORM model for a single key-value pair.

    Attributes:
        key: Namespaced key (primary key).
        value: Stored text value (JSON documents are stored as text).
        expires_at: Optional expiry; an expired entry reads as absent.
        updated_at: Timestamp of the last write.
    """

    __tablename__ = "kv_entries"

    key: Mapped[str] = mapped_column(String(512), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        """Return string representation of KVEntry."""
        return f"<KVEntry(key='{self.key}', expires_at={self.expires_at})>"


__all__ = ["KVEntry"]
