# src/marketplace/api/v1/user.py

from typing import Optional
from fastapi import APIRouter, File, Form, UploadFile
from marketplace.core.context import AppContext
from marketplace.api.dependencies.context import PublicContextDep, AuthContextDep
from marketplace.api.dependencies.uploads import read_upload, form_fields
from marketplace.schemas.identity.user_schemas import UserRead
from marketplace.services.identity.user_service import UserService
from marketplace.schemas.common import JsonResponse

router = APIRouter()


@router.put("/profile", response_model=JsonResponse[UserRead], summary="Update Own Profile")
async def update_profile(
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    bio: Optional[str] = Form(None),
    store_name: Optional[str] = Form(None),
    profile_image: Optional[UploadFile] = File(None),
    context: AppContext = AuthContextDep
):
    """Multipart partial update; blank fields keep their stored value."""
    service = UserService(context)
    user = await service.update_profile(
        form_fields(name=name, email=email, bio=bio, store_name=store_name),
        profile_image=await read_upload(profile_image, "profile_image", context.assets.max_upload_size),
    )
    return JsonResponse(data=user)


@router.get("/{user_uuid}", response_model=JsonResponse[UserRead], summary="Public Profile")
async def get_user_profile(user_uuid: str, context: AppContext = PublicContextDep):
    service = UserService(context)
    return JsonResponse(data=await service.get_profile(user_uuid))
