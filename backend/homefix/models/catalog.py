# backend/homefix/models/catalog.py
"""Catalog records consulted at booking creation. CRUD lives elsewhere."""

from sqlalchemy import Boolean, Column, Float, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship
import ulid

from ..database import Base


class Category(Base):
    __tablename__ = "categories"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    name = Column(String(120), nullable=False, unique=True)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    services = relationship("Service", back_populates="category")


class Service(Base):
    __tablename__ = "services"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    category_id = Column(String(26), ForeignKey("categories.id"), nullable=False, index=True)
    # Technician delivering the service, when the catalog entry is technician-owned
    technician_id = Column(String(26), ForeignKey("users.id"), nullable=True, index=True)
    title = Column(String(200), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    # Reputation projection, written only by RatingAggregator
    rating = Column(Float, nullable=False, default=0.0)
    review_count = Column(Integer, nullable=False, default=0)

    category = relationship("Category", back_populates="services")
