# src/marketplace/services/product/product_service.py

import logging
from dataclasses import dataclass
from typing import List, Optional
from pydantic import ValidationError

from marketplace.core.context import AppContext
from marketplace.dao.identity.user_dao import UserDao
from marketplace.dao.product.product_dao import ProductDao
from marketplace.models import Product
from marketplace.schemas.product.product_schemas import (
    ProductCreate, ProductUpdate, ProductRead, ProductWithOwner, ProductDetail,
)
from marketplace.services.asset.asset_manager import UploadPayload
from marketplace.services.asset.utils import original_filename
from marketplace.services.base_service import BaseService
from marketplace.services.permission.authorization_gate import AuthorizationGate
from marketplace.services.exceptions import (
    NotFoundError,
    UserNotFound,
    ValidationFailure,
)

logger = logging.getLogger(__name__)


@dataclass
class ProductDownload:
    content: bytes
    filename: str


class ProductService(BaseService):
    """
    Product lifecycle: create, update and delete keep records and their stored
    assets consistent; reads go straight to the store.
    """

    def __init__(self, context: AppContext):
        super().__init__(context)
        self.assets = context.assets
        self.product_dao = ProductDao(context.db)
        self.user_dao = UserDao(context.db)

    # ==========================================================================
    # Reads
    # ==========================================================================

    async def list_products(self, search: Optional[str] = None) -> List[ProductWithOwner]:
        search = search.strip() if search else None
        products = await self.product_dao.list_with_owner_summary(search=search or None)
        return [ProductWithOwner.model_validate(p) for p in products]

    async def get_product(self, product_uuid: str) -> ProductDetail:
        product = await self.product_dao.get_with_owner_profile(product_uuid)
        if not product:
            raise NotFoundError("Product not found.")
        return ProductDetail.model_validate(product)

    async def list_my_products(self) -> List[ProductRead]:
        products = await self.product_dao.list_by_owner(self.context.actor)
        return [ProductRead.model_validate(p) for p in products]

    async def list_user_products(self, user_uuid: str) -> List[ProductRead]:
        owner = await self.user_dao.get_by_uuid(user_uuid)
        if not owner:
            raise UserNotFound("User not found.")
        products = await self.product_dao.list_by_owner(owner)
        return [ProductRead.model_validate(p) for p in products]

    async def download_product(self, product_uuid: str) -> ProductDownload:
        product = await self.product_dao.get_by_uuid(product_uuid)
        if not product:
            raise NotFoundError("Product not found.")
        if not product.file_url:
            raise NotFoundError("This product has no downloadable file.")
        content = await self.assets.open(product.file_url)
        name = original_filename(product.file_url.rsplit("/", 1)[-1])
        return ProductDownload(content=content, filename=name)

    # ==========================================================================
    # Mutations
    # ==========================================================================

    async def create_product(
        self,
        fields: dict,
        image: Optional[UploadPayload] = None,
        file: Optional[UploadPayload] = None,
    ) -> ProductRead:
        product = await self._create_product(fields, image, file)
        return ProductRead.model_validate(product)

    async def update_product(
        self,
        product_uuid: str,
        fields: dict,
        image: Optional[UploadPayload] = None,
        file: Optional[UploadPayload] = None,
    ) -> ProductRead:
        product = await self._update_product(product_uuid, fields, image, file)
        return ProductRead.model_validate(product)

    async def delete_product(self, product_uuid: str) -> None:
        caller = self.context.actor
        product = await self.product_dao.get_by_uuid(product_uuid)
        if not product:
            raise NotFoundError("Product not found.")
        AuthorizationGate.assert_owner(product, caller)

        image_url, file_url = product.image_url, product.file_url
        try:
            await self.product_dao.delete(product)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        logger.info(f"Deleted product {product_uuid}")

        # the record is gone; asset release is best-effort
        await self.assets.remove(image_url)
        await self.assets.remove(file_url)

    async def _create_product(
        self, fields: dict, image: Optional[UploadPayload], file: Optional[UploadPayload]
    ) -> Product:
        caller = self.context.actor
        try:
            data = ProductCreate.model_validate(fields)
        except ValidationError as e:
            raise ValidationFailure.from_pydantic(e, "Invalid product data.")

        async with self.assets.staging() as staged:
            image_url = await staged.store(image) if image is not None else self.assets.placeholder
            file_url = await staged.store(file) if file is not None else ""

            product = Product(
                **data.model_dump(),
                image_url=image_url,
                file_url=file_url,
                creator_id=caller.id,
            )
            try:
                await self.product_dao.add(product)
                await self.db.commit()
            except Exception:
                await self.db.rollback()
                logger.warning("Product insert failed, discarding staged uploads")
                raise
            staged.commit()

        logger.info(f"User {caller.uuid} created product {product.uuid}")
        return product

    async def _update_product(
        self,
        product_uuid: str,
        fields: dict,
        image: Optional[UploadPayload],
        file: Optional[UploadPayload],
    ) -> Product:
        caller = self.context.actor
        product = await self.product_dao.get_by_uuid(product_uuid)
        if not product:
            raise NotFoundError("Product not found.")
        AuthorizationGate.assert_owner(product, caller)

        try:
            changes = ProductUpdate.model_validate(fields).changes()
        except ValidationError as e:
            raise ValidationFailure.from_pydantic(e, "Invalid product data.")

        async with self.assets.staging() as staged:
            if image is not None:
                changes["image_url"] = await staged.store(image)
                staged.retire(product.image_url)
            if file is not None:
                changes["file_url"] = await staged.store(file)
                staged.retire(product.file_url)

            if not changes:
                return product

            try:
                await self.product_dao.update(product, changes)
                await self.db.commit()
            except Exception:
                await self.db.rollback()
                logger.warning(f"Update of product {product_uuid} failed, keeping previous assets")
                raise
            staged.commit()

        logger.info(f"Updated product {product_uuid}: {sorted(changes)}")
        return product
