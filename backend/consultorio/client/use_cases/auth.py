from typing import Any, Dict, Mapping

from ..adapter import HttpAdapter
from .base import use_case_errors


async def register_user_use_case(fetcher: HttpAdapter, body: Mapping[str, Any]) -> Dict[str, Any]:
    with use_case_errors("Error al registrar el usuario"):
        return await fetcher.post("/auth/register", body)


async def login_use_case(fetcher: HttpAdapter, email: str, password: str) -> Dict[str, Any]:
    """Devuelve `{"user", "token"}`; el token se usa luego como Bearer en el adaptador."""
    with use_case_errors("Error al iniciar sesión"):
        return await fetcher.post("/auth/login", {"email": email, "password": password})


async def confirm_account_use_case(fetcher: HttpAdapter, token: str) -> str:
    with use_case_errors("Error al confirmar la cuenta"):
        response = await fetcher.get(f"/auth/validate-email/{token}")
        return response["message"]


async def reset_password_use_case(fetcher: HttpAdapter, email: str) -> str:
    with use_case_errors("Error al solicitar el cambio de password"):
        response = await fetcher.post("/auth/reset-password", {"email": email})
        return response["message"]


async def check_user_token_use_case(fetcher: HttpAdapter, token: str) -> bool:
    with use_case_errors("Error al verificar el token"):
        await fetcher.get(f"/auth/change-password/{token}")
    return True


async def change_password_use_case(fetcher: HttpAdapter, token: str, new_password: str) -> str:
    with use_case_errors("Error al cambiar el password"):
        response = await fetcher.post(f"/auth/change-password/{token}", {"newPassword": new_password})
        return response["message"]


async def get_profile_use_case(fetcher: HttpAdapter) -> Dict[str, Any]:
    with use_case_errors("Error al obtener el perfil"):
        response = await fetcher.get("/user/profile")
        return response["user"]


async def update_profile_use_case(fetcher: HttpAdapter, changes: Mapping[str, Any]) -> Dict[str, Any]:
    with use_case_errors("Error al actualizar el perfil"):
        response = await fetcher.put("/user/profile", changes)
        return response["user"]


async def update_password_use_case(fetcher: HttpAdapter, current_password: str, new_password: str) -> str:
    with use_case_errors("Error al actualizar el password"):
        response = await fetcher.put(
            "/user/password", {"currentPassword": current_password, "newPassword": new_password}
        )
        return response["message"]
