# src/marketplace/dao/product/product_dao.py

from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from marketplace.dao.base_dao import BaseDao, escape_like
from marketplace.models import Product, User

# Owner projections embedded in product reads.
# Lists only carry the summary; the detail page also shows the storefront profile.
OWNER_SUMMARY_FIELDS = ["uuid", "name", "email"]
OWNER_PROFILE_FIELDS = ["uuid", "name", "email", "bio", "store_name", "profile_image"]


class ProductDao(BaseDao[Product]):
    def __init__(self, db_session: AsyncSession):
        super().__init__(Product, db_session)

    async def get_by_uuid(self, uuid: str, withs: Optional[list] = None) -> Optional[Product]:
        return await self.get_one(where={"uuid": uuid}, withs=withs)

    async def get_with_owner_profile(self, uuid: str) -> Optional[Product]:
        return await self.get_by_uuid(uuid, withs=[{"name": "creator", "fields": OWNER_PROFILE_FIELDS}])

    async def list_with_owner_summary(self, search: Optional[str] = None) -> List[Product]:
        """All products, newest first, optionally filtered by a case-insensitive title/description match."""
        where_or = None
        if search:
            pattern = f"%{escape_like(search)}%"
            where_or = [("title", "ilike", pattern), ("description", "ilike", pattern)]
        return await self.get_list(
            where_or=where_or,
            withs=[{"name": "creator", "fields": OWNER_SUMMARY_FIELDS}],
            order=[Product.created_at.desc(), Product.id.desc()],
        )

    async def list_by_owner(self, owner: User) -> List[Product]:
        return await self.get_list(
            where={"creator_id": owner.id},
            order=[Product.created_at.desc(), Product.id.desc()],
        )
