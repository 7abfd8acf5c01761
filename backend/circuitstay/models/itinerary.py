import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric, String, func
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from circuitstay.database import Base


class Itinerary(Base):
    __tablename__ = "itineraries"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    circuit_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("circuits.id", ondelete="CASCADE"), nullable=False, index=True
    )
    theme: Mapped[str] = mapped_column(String(100), default="")
    category_tags: Mapped[list] = mapped_column(JSONB, default=list)
    experience_tags: Mapped[list] = mapped_column(JSONB, default=list)
    duration_days: Mapped[int] = mapped_column(Integer, default=1)
    guest_type: Mapped[str | None] = mapped_column(String(20))  # Family | Solo | Couple | Group
    pax_min: Mapped[int] = mapped_column(Integer, default=0)
    pax_max: Mapped[int] = mapped_column(Integer, default=0)
    budget_min: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    budget_max: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    transport_included: Mapped[bool] = mapped_column(Boolean, default=False)
    car_type: Mapped[str] = mapped_column(String(20), default="hatchback")
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    no_of_rooms: Mapped[int] = mapped_column(Integer, default=0)
    image: Mapped[str] = mapped_column(String(500), default="")
    # [{day, title, description, stay_at_homestay_id, activities, travel_distance_km}]
    day_wise_plan: Mapped[list] = mapped_column(JSONB, default=list)
    local_guide: Mapped[dict] = mapped_column(JSONB, default=dict)
    addon_suggestions: Mapped[list] = mapped_column(JSONB, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    circuit: Mapped["Circuit"] = relationship(back_populates="itineraries")
