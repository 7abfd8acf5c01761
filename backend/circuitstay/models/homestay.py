import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from circuitstay.database import Base


class Homestay(Base):
    __tablename__ = "homestays"
    __table_args__ = (
        UniqueConstraint("circuit_id", "homestay_name", "place_name", name="uniq_circuit_homestay_place"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    circuit_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("circuits.id", ondelete="CASCADE"), nullable=False, index=True
    )
    homestay_name: Mapped[str] = mapped_column(String(200), nullable=False)
    place_name: Mapped[str] = mapped_column(String(200), nullable=False)
    distance: Mapped[Decimal] = mapped_column(Numeric(8, 2), default=0)  # km from circuit reference point
    images: Mapped[list] = mapped_column(JSONB, default=list)
    description: Mapped[str] = mapped_column(Text, default="")
    pricing_type: Mapped[str] = mapped_column(String(20), default="perhead")  # perhead | perroom
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    contact: Mapped[str] = mapped_column(String(200), default="")
    rooms: Mapped[int] = mapped_column(Integer, default=0)
    room_configs: Mapped[list] = mapped_column(JSONB, default=list)
    room_types: Mapped[list] = mapped_column(JSONB, default=list)
    guest_types: Mapped[list] = mapped_column(JSONB, default=list)
    addons: Mapped[list] = mapped_column(JSONB, default=list)
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False)
    experiences: Mapped[list] = mapped_column(JSONB, default=list)
    experience_distances: Mapped[dict] = mapped_column(JSONB, default=dict)
    location_types: Mapped[list] = mapped_column(JSONB, default=list)  # Offbeat | City
    average_rating: Mapped[Decimal] = mapped_column(Numeric(3, 2), default=0)
    rating_count: Mapped[int] = mapped_column(Integer, default=0)
    reviews: Mapped[list] = mapped_column(JSONB, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    circuit: Mapped["Circuit"] = relationship(back_populates="homestays")
