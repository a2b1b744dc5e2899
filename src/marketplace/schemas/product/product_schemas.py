# src/marketplace/schemas/product/product_schemas.py

from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field, ConfigDict, condecimal, field_serializer
from typing import Optional
from marketplace.models.product import MIN_PRICE
from marketplace.schemas.identity.user_schemas import OwnerSummary, OwnerProfile

# same floor as the price_minimum CHECK constraint
Price = condecimal(ge=Decimal(MIN_PRICE), max_digits=10, decimal_places=2)

TITLE_MIN_LENGTH = 3
DESCRIPTION_MIN_LENGTH = 10

# ====================================================================
# Input Schemas
# ====================================================================

class ProductCreate(BaseModel):
    title: str = Field(..., min_length=TITLE_MIN_LENGTH, max_length=100)
    description: str = Field(..., min_length=DESCRIPTION_MIN_LENGTH)
    price: Price = Field(..., description="Positive price, at least 0.01")


class ProductUpdate(BaseModel):
    """Partial update: unset fields keep their stored value."""
    title: Optional[str] = Field(None, min_length=TITLE_MIN_LENGTH, max_length=100)
    description: Optional[str] = Field(None, min_length=DESCRIPTION_MIN_LENGTH)
    price: Optional[Price] = None

    def changes(self) -> dict:
        return {k: v for k, v in self.model_dump(exclude_unset=True).items() if v is not None}

# ====================================================================
# Output Schemas
# ====================================================================

class ProductRead(BaseModel):
    uuid: str
    title: str
    description: str
    price: Decimal
    image_url: str
    file_url: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("price")
    def serialize_price(self, price: Decimal) -> float:
        return float(price)


class ProductWithOwner(ProductRead):
    creator: OwnerSummary


class ProductDetail(ProductRead):
    creator: OwnerProfile
