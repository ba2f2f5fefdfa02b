import os
from dataclasses import dataclass, field
from typing import List

DEFAULT_DB_PATH = os.path.join(os.path.dirname(__file__), "data.db")


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str) -> List[str]:
    raw = os.getenv(name, "")
    return [item.strip().rstrip("/") for item in raw.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    """Configuración de la aplicación, leída del entorno en `from_env`."""

    database_path: str = DEFAULT_DB_PATH
    jwt_seed: str = "dev-seed-change-me"
    jwt_expires_hours: int = 72
    frontend_url: str = "http://localhost:5173"
    cors_extra_origins: List[str] = field(default_factory=list)
    rut_verify_check_digit: bool = False
    demo_trial_days: int = 15
    log_level: str = "INFO"

    @property
    def allowed_origins(self) -> List[str]:
        origins = [self.frontend_url.rstrip("/")]
        for origin in self.cors_extra_origins:
            if origin not in origins:
                origins.append(origin)
        return origins

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_path=os.getenv("CONSULTORIO_DB_PATH", DEFAULT_DB_PATH),
            jwt_seed=os.getenv("JWT_SEED", cls.jwt_seed),
            jwt_expires_hours=int(os.getenv("JWT_EXPIRES_HOURS", "72")),
            frontend_url=os.getenv("FRONTEND_URL", cls.frontend_url),
            cors_extra_origins=_env_list("CORS_EXTRA_ORIGINS"),
            rut_verify_check_digit=_env_bool("RUT_VERIFY_CHECK_DIGIT"),
            demo_trial_days=int(os.getenv("DEMO_TRIAL_DAYS", "15")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
