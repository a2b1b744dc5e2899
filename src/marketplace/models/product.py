from sqlalchemy import (
    Column, Integer, String, Text, ForeignKey, DateTime, func, DECIMAL, CheckConstraint
)
from sqlalchemy.orm import relationship
from marketplace.db.base import Base
from marketplace.utils.id_generator import generate_uuid

MIN_PRICE = "0.01"


class Product(Base):
    """
    A digital good offered by its creator.
    `image_url` falls back to the placeholder sentinel, `file_url` is '' until a file is uploaded.
    """
    __tablename__ = 'products'

    id = Column(Integer, primary_key=True)
    uuid = Column(String(36), nullable=False, unique=True, index=True, default=generate_uuid)

    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    price = Column(DECIMAL(10, 2), nullable=False)

    image_url = Column(String(512), nullable=False)
    file_url = Column(String(512), nullable=False, default="")

    # Owner. Set once on creation, never reassigned.
    creator_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)

    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    creator = relationship("User", back_populates="products")

    __table_args__ = (
        CheckConstraint(f"price >= {MIN_PRICE}", name="price_minimum"),
    )
