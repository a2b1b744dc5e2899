# src/marketplace/api/v1/product.py

from typing import List, Optional
from urllib.parse import quote
from fastapi import APIRouter, File, Form, Query, Response, UploadFile, status
from marketplace.core.context import AppContext
from marketplace.api.dependencies.context import AuthContextDep, PublicContextDep
from marketplace.api.dependencies.uploads import read_upload, form_fields
from marketplace.schemas.common import JsonResponse, MsgResponse
from marketplace.schemas.product.product_schemas import ProductRead, ProductWithOwner, ProductDetail
from marketplace.services.product.product_service import ProductService

router = APIRouter()

# ==============================================================================
# Public reads
# ==============================================================================

@router.get("", response_model=JsonResponse[List[ProductWithOwner]], summary="List Products")
async def list_products(
    search: Optional[str] = Query(None, max_length=200),
    context: AppContext = PublicContextDep
):
    """All products, newest first. `search` matches title or description, case-insensitively."""
    service = ProductService(context)
    return JsonResponse(data=await service.list_products(search=search))


@router.get("/user/me", response_model=JsonResponse[List[ProductRead]], summary="List My Products")
async def list_my_products(context: AppContext = AuthContextDep):
    service = ProductService(context)
    return JsonResponse(data=await service.list_my_products())


@router.get("/user/{user_uuid}", response_model=JsonResponse[List[ProductRead]], summary="List A User's Products")
async def list_user_products(user_uuid: str, context: AppContext = PublicContextDep):
    service = ProductService(context)
    return JsonResponse(data=await service.list_user_products(user_uuid))


@router.get("/{product_uuid}", response_model=JsonResponse[ProductDetail], summary="Product Detail")
async def get_product(product_uuid: str, context: AppContext = PublicContextDep):
    service = ProductService(context)
    return JsonResponse(data=await service.get_product(product_uuid))


@router.get("/{product_uuid}/download", summary="Download Product File")
async def download_product(product_uuid: str, context: AppContext = AuthContextDep):
    """Open to any authenticated user; there is no purchase check."""
    service = ProductService(context)
    download = await service.download_product(product_uuid)
    return Response(
        content=download.content,
        media_type="application/octet-stream",
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(download.filename)}"},
    )

# ==============================================================================
# Owner mutations
# ==============================================================================

@router.post("", response_model=JsonResponse[ProductRead], status_code=status.HTTP_201_CREATED, summary="Create Product")
async def create_product(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    file: Optional[UploadFile] = File(None),
    context: AppContext = AuthContextDep
):
    service = ProductService(context)
    product = await service.create_product(
        form_fields(title=title, description=description, price=price),
        image=await read_upload(image, "image", context.assets.max_upload_size),
        file=await read_upload(file, "file", context.assets.max_upload_size),
    )
    return JsonResponse(data=product, status=status.HTTP_201_CREATED)


@router.put("/{product_uuid}", response_model=JsonResponse[ProductRead], summary="Update Product")
async def update_product(
    product_uuid: str,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    file: Optional[UploadFile] = File(None),
    context: AppContext = AuthContextDep
):
    """Partial update; a new image or file replaces and releases the previous one."""
    service = ProductService(context)
    product = await service.update_product(
        product_uuid,
        form_fields(title=title, description=description, price=price),
        image=await read_upload(image, "image", context.assets.max_upload_size),
        file=await read_upload(file, "file", context.assets.max_upload_size),
    )
    return JsonResponse(data=product)


@router.delete("/{product_uuid}", response_model=JsonResponse[MsgResponse], summary="Delete Product")
async def delete_product(product_uuid: str, context: AppContext = AuthContextDep):
    service = ProductService(context)
    await service.delete_product(product_uuid)
    return JsonResponse(data=MsgResponse(msg="Product deleted successfully"))
