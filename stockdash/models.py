from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from stockdash.config import DEFAULT_MINIMUM_LEVEL
from stockdash.database import Base


class Product(Base):
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    code: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    description: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    available: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    in_transit: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    minimum_level: Mapped[int] = mapped_column(Integer, default=DEFAULT_MINIMUM_LEVEL, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
