from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import BigInteger, ForeignKey, Index, String, text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column

from support_router.infrastructure.db.base import Base


class SupportSessionModel(Base):
    __tablename__ = "support_sessions"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )
    customer_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("participants.id", ondelete="CASCADE"),
        nullable=False,
    )
    operator_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("participants.id", ondelete="CASCADE"),
        nullable=False,
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
    closed_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    __table_args__ = (
        Index(
            "uq_support_sessions_active_customer",
            "customer_id",
            unique=True,
            postgresql_where=text("status = 'active'"),
        ),
        Index(
            "uq_support_sessions_active_operator",
            "operator_id",
            unique=True,
            postgresql_where=text("status = 'active'"),
        ),
        Index("ix_support_sessions_created", "created_at"),
    )
