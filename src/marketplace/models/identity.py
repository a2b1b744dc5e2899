from sqlalchemy import Column, Integer, String, Text, DateTime, func
from sqlalchemy.orm import relationship
from marketplace.db.base import Base
from marketplace.utils.id_generator import generate_uuid


class User(Base):
    """Marketplace identity. Every creator and buyer is a User."""
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True, comment="Internal primary key")
    uuid = Column(String(36), nullable=False, unique=True, index=True, default=generate_uuid, comment="Public identifier exposed by the API")

    name = Column(String(100), nullable=False, comment="Display name")
    email = Column(String(255), unique=True, nullable=False, index=True, comment="Login email, unique")
    password_hash = Column(String(255), nullable=False, comment="bcrypt hash, never returned by the API")

    # Profile
    bio = Column(Text, nullable=True, comment="Short creator bio")
    store_name = Column(String(100), nullable=True, comment="Storefront display name")
    profile_image = Column(String(512), nullable=True, comment="Reference to the profile image asset")

    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    products = relationship("Product", back_populates="creator", passive_deletes=True)
