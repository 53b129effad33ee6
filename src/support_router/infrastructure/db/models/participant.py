from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, Index, String, text
from sqlalchemy.dialects.postgresql import ARRAY, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column

from support_router.infrastructure.db.base import Base


class ParticipantModel(Base):
    __tablename__ = "participants"

    # external chat/account id, assigned by the transport
    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="customer")
    availability: Mapped[str] = mapped_column(String(20), nullable=False, default="available")
    supported_languages: Mapped[list[str]] = mapped_column(
        ARRAY(String(16)),
        nullable=False,
        default=list,
        server_default=text("'{}'"),
    )
    selected_language: Mapped[str | None] = mapped_column(String(16), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )

    __table_args__ = (
        Index("ix_participants_operator_lookup", "role", "availability", "created_at"),
    )
