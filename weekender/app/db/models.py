from __future__ import annotations

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    Integer,
    String,
    Text,
    false,
    func,
    text,
)

from .core import Base


class PlaceRecord(Base):
    """A saved destination.

    `name` is deliberately not unique here; duplicates are kept out by the
    dedup gate in front of every insert.
    """

    __tablename__ = "places"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, index=True)
    category = Column(
        String(32), nullable=False, default="general", server_default=text("'general'")
    )
    subcategory = Column(String(128), nullable=True)
    indoor_outdoor = Column(String(16), nullable=True)
    address = Column(String(512), nullable=True)
    google_maps_url = Column(String(1024), nullable=True)
    distance_miles = Column(Float, nullable=True)
    drive_time_minutes = Column(Integer, nullable=True)
    rating = Column(Float, nullable=True)
    kid_friendly = Column(Boolean, nullable=False, default=False, server_default=false())
    wheelchair_accessible = Column(Boolean, nullable=False, default=False, server_default=false())
    favorite = Column(Boolean, nullable=False, default=False, server_default=false())
    visited = Column(Boolean, nullable=False, default=False, server_default=false())
    # direct URL or "googleref:<token>", see images.py
    image_url = Column(Text, nullable=True)
    overview = Column(Text, nullable=True)
    key_highlights = Column(Text, nullable=True)
    insider_tips = Column(Text, nullable=True)
    entry_fee = Column(String(255), nullable=True)
    best_seasons = Column(String(255), nullable=True)
    average_visit_duration = Column(String(255), nullable=True)
    user_notes = Column(Text, nullable=True)
    nearby_restaurants = Column(JSON, nullable=False, default=list, server_default=text("'[]'"))
    source = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    def to_dict(self) -> dict[str, object]:
        return {column.name: getattr(self, column.name) for column in self.__table__.columns}


class PlanRecord(Base):
    __tablename__ = "weekend_plans"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=True)
    # ordered [{"place_id": int, "note": str | None}]; ids are weak references
    places = Column(JSON, nullable=False, default=list, server_default=text("'[]'"))
    plan_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)
    status = Column(String(16), nullable=False, default="draft", server_default=text("'draft'"))
    share_code = Column(String(64), nullable=True, unique=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    def to_dict(self) -> dict[str, object]:
        return {column.name: getattr(self, column.name) for column in self.__table__.columns}


class PreferencesRecord(Base):
    """Single-user settings; the app reads and writes the first row only."""

    __tablename__ = "user_preferences"

    id = Column(Integer, primary_key=True, autoincrement=True)
    home_address = Column(String(512), nullable=True)
    home_latitude = Column(Float, nullable=True)
    home_longitude = Column(Float, nullable=True)
    default_max_distance = Column(
        Integer, nullable=False, default=100, server_default=text("100")
    )
    preferred_categories = Column(JSON, nullable=False, default=list, server_default=text("'[]'"))
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    def to_dict(self) -> dict[str, object]:
        return {column.name: getattr(self, column.name) for column in self.__table__.columns}
