import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from circuitstay.database import Base


class Circuit(Base):
    __tablename__ = "circuits"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    category: Mapped[str | None] = mapped_column(String(100))
    # Labels below are stored normalized: lowercase, whitespace -> "_"
    categories: Mapped[list] = mapped_column(JSONB, default=list)
    tags: Mapped[list] = mapped_column(JSONB, default=list)
    theme: Mapped[str | None] = mapped_column(String(100))
    experiences: Mapped[list] = mapped_column(JSONB, default=list)
    featured_activities: Mapped[list] = mapped_column(JSONB, default=list)
    locations: Mapped[list] = mapped_column(JSONB, default=list)
    best_seasons: Mapped[list] = mapped_column(JSONB, default=list)
    entry_points: Mapped[list] = mapped_column(JSONB, default=list)
    transport: Mapped[list] = mapped_column(JSONB, default=list)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    duration: Mapped[str] = mapped_column(String(100), nullable=False)
    is_offbeat: Mapped[bool] = mapped_column(Boolean, default=False)
    # {"hatchback": 12, "sedan": 14, "suv": 18} per km
    km_rates: Mapped[dict] = mapped_column(JSONB, default=dict)
    img: Mapped[str | None] = mapped_column(String(500))
    images: Mapped[list] = mapped_column(JSONB, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    homestays: Mapped[list["Homestay"]] = relationship(back_populates="circuit")
    itineraries: Mapped[list["Itinerary"]] = relationship(back_populates="circuit")
