"""FastAPI endpoints for the Identity domain — accounts and back-office user management."""

from fastapi import APIRouter, Depends

from identity.api.dependencies import current_subject, get_store, get_verifier, require_admin
from identity.api.schemas import (
    CreateUserRequest,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    StatusResponse,
    UpdateProfileRequest,
    UpdateUserRequest,
    UserResponse,
)
from identity.tokens import IdentityVerifier, Subject
from identity.user.administration import DeleteUser, UpdateUser, UserAdministrationHandler
from identity.user.authentication import Login, LoginHandler
from identity.user.profile import ProfileHandler, UpdateProfile
from identity.user.registration import RegisterUser, RegisterUserHandler
from shared.store import Store

# ---------------------------------------------------------------------------
# Auth Router
# ---------------------------------------------------------------------------
auth_router = APIRouter(prefix="/auth", tags=["auth"])


@auth_router.post("/register", status_code=201, response_model=UserResponse)
def register(body: RegisterRequest, store: Store = Depends(get_store)) -> UserResponse:
    command = RegisterUser(
        name=body.name,
        mobile=body.mobile,
        email=body.email,
        password=body.password,
        address=body.address,
    )
    user = RegisterUserHandler(store).register_user(command)
    return UserResponse.model_validate(user)


@auth_router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    store: Store = Depends(get_store),
    verifier: IdentityVerifier = Depends(get_verifier),
) -> LoginResponse:
    command = Login(mobile=body.mobile, email=body.email, password=body.password)
    result = LoginHandler(store, verifier).login(command)
    return LoginResponse(token=result.token, user=UserResponse.model_validate(result.user))


@auth_router.get("/profile", response_model=UserResponse)
def get_profile(
    subject: Subject = Depends(current_subject),
    store: Store = Depends(get_store),
) -> UserResponse:
    return UserResponse.model_validate(ProfileHandler(store).get_profile(subject.id))


@auth_router.put("/profile", response_model=UserResponse)
def update_profile(
    body: UpdateProfileRequest,
    subject: Subject = Depends(current_subject),
    store: Store = Depends(get_store),
) -> UserResponse:
    command = UpdateProfile(user_id=subject.id, changes=body.model_dump(exclude_unset=True))
    user = ProfileHandler(store).update_profile(command)
    return UserResponse.model_validate(user)


# ---------------------------------------------------------------------------
# Back-office User Router
# ---------------------------------------------------------------------------
admin_user_router = APIRouter(prefix="/admin/users", tags=["admin"], dependencies=[Depends(require_admin)])


@admin_user_router.get("", response_model=list[UserResponse])
def list_users(store: Store = Depends(get_store)) -> list[UserResponse]:
    return [UserResponse.model_validate(user) for user in UserAdministrationHandler(store).list_users()]


@admin_user_router.post("", status_code=201, response_model=UserResponse)
def create_user(body: CreateUserRequest, store: Store = Depends(get_store)) -> UserResponse:
    command = RegisterUser(
        name=body.name,
        mobile=body.mobile,
        email=body.email,
        password=body.password,
        address=body.address,
    )
    return UserResponse.model_validate(UserAdministrationHandler(store).create_user(command))


@admin_user_router.put("/{user_id}", response_model=UserResponse)
def update_user(user_id: str, body: UpdateUserRequest, store: Store = Depends(get_store)) -> UserResponse:
    command = UpdateUser(user_id=user_id, changes=body.model_dump(exclude_unset=True))
    return UserResponse.model_validate(UserAdministrationHandler(store).update_user(command))


@admin_user_router.delete("/{user_id}", response_model=StatusResponse)
def delete_user(
    user_id: str,
    subject: Subject = Depends(require_admin),
    store: Store = Depends(get_store),
) -> StatusResponse:
    UserAdministrationHandler(store).delete_user(DeleteUser(user_id=user_id, requested_by=subject.id))
    return StatusResponse(status="deleted")
