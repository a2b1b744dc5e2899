# src/marketplace/api/v1/identity.py

from fastapi import APIRouter, status
from marketplace.core.context import AppContext
from marketplace.api.dependencies.context import PublicContextDep, AuthContextDep
from marketplace.schemas.identity.user_schemas import UserCreate, UserRead, LoginRequest, AuthSession
from marketplace.services.identity.user_service import UserService
from marketplace.schemas.common import JsonResponse

router = APIRouter()


@router.post(
    "/register",
    response_model=JsonResponse[AuthSession],
    status_code=status.HTTP_201_CREATED,
    summary="User Registration",
    description="Create a new account and return an access token for it."
)
async def register_user(
    user_in: UserCreate,
    context: AppContext = PublicContextDep
):
    user_service = UserService(context)
    session = await user_service.register_user(user_create=user_in)
    return JsonResponse(data=session, status=status.HTTP_201_CREATED)


@router.post(
    "/login",
    response_model=JsonResponse[AuthSession],
    summary="Login",
    description="Exchange email and password for a JWT access token."
)
async def login(
    login_in: LoginRequest,
    context: AppContext = PublicContextDep
):
    user_service = UserService(context)
    session = await user_service.login(login_request=login_in)
    return JsonResponse(data=session)


@router.get(
    "/me",
    response_model=JsonResponse[UserRead],
    summary="Get Current User",
)
async def read_users_me(
    context: AppContext = AuthContextDep
):
    """Returns the profile of the logged-in user."""
    user_service = UserService(context)
    return JsonResponse(data=await user_service.get_me())
