from typing import Any, Dict

from fastapi import APIRouter, Depends, status

from ...domain.dtos import (
    ChangePasswordDto,
    DemoUserDto,
    LoginUserDto,
    RegisterUserDto,
    ResetPasswordDto,
    UpdatePasswordDto,
    UpdateProfileDto,
)
from ...domain.result import unwrap
from ...schemas import DemoUserOut, LoginResponse, MessageOut, UserEnvelope
from ..dependencies import Services, get_current_user, get_services, read_body

router = APIRouter(prefix="/auth", tags=["auth"])
user_router = APIRouter(prefix="/user", tags=["user"])


@router.post("/register", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
def register(body: Dict[str, Any] = Depends(read_body), services: Services = Depends(get_services)):
    user = services.users.register(unwrap(RegisterUserDto.create(body)))
    return {"message": "Usuario creado correctamente, revisa tu email para confirmar tu cuenta", "user": user}


@router.post(
    "/demo",
    response_model=DemoUserOut,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
def create_demo(body: Dict[str, Any] = Depends(read_body), services: Services = Depends(get_services)):
    result = services.users.create_demo(unwrap(DemoUserDto.create(body)))
    return dict(result, message="Usuario demo creado correctamente")


@router.post("/login", response_model=LoginResponse)
def login(body: Dict[str, Any] = Depends(read_body), services: Services = Depends(get_services)):
    return services.users.login(unwrap(LoginUserDto.create(body)))


@router.get("/validate-email/{token}", response_model=MessageOut)
def validate_email(token: str, services: Services = Depends(get_services)):
    services.users.validate_email(token)
    return {"message": "Usuario validado correctamente"}


@router.post("/reset-password", response_model=MessageOut)
def reset_password(body: Dict[str, Any] = Depends(read_body), services: Services = Depends(get_services)):
    services.users.reset_password(unwrap(ResetPasswordDto.create(body)))
    return {"message": "Hemos enviado un email con las instrucciones"}


@router.get("/change-password/{token}", response_model=MessageOut)
def check_token(token: str, services: Services = Depends(get_services)):
    services.users.check_token(token)
    return {"message": "Token válido"}


@router.post("/change-password/{token}", response_model=MessageOut)
def change_password(
    token: str,
    body: Dict[str, Any] = Depends(read_body),
    services: Services = Depends(get_services),
):
    dto = unwrap(ChangePasswordDto.create(body))
    services.users.change_password(token, dto.newPassword)
    return {"message": "Password modificado correctamente"}


@user_router.get("/profile", response_model=UserEnvelope)
def get_profile(user=Depends(get_current_user)):
    return {"user": user}


@user_router.put("/profile", response_model=UserEnvelope)
def update_profile(
    body: Dict[str, Any] = Depends(read_body),
    user=Depends(get_current_user),
    services: Services = Depends(get_services),
):
    updated = services.users.update_profile(user["id"], unwrap(UpdateProfileDto.create(body)))
    return {"message": "Perfil actualizado correctamente", "user": updated}


@user_router.put("/password", response_model=MessageOut)
def update_password(
    body: Dict[str, Any] = Depends(read_body),
    user=Depends(get_current_user),
    services: Services = Depends(get_services),
):
    services.users.update_password(user["id"], unwrap(UpdatePasswordDto.create(body)))
    return {"message": "Password actualizado correctamente"}
