from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Base
    APP_ENV: str = "dev"  # dev | test | prod
    APP_NAME: str = "Notes Portal API"
    APP_VERSION: str = "0.1.0"

    # CORS
    CORS_ORIGINS: str = "*"

    # Logging
    LOG_LEVEL: str = "INFO"

    # Services externes : "supabase" (HTTP) ou "memory" (dev / tests)
    BACKEND: str = "supabase"

    # Supabase
    SUPABASE_URL: str = "http://localhost:54321"
    SUPABASE_SERVICE_ROLE_KEY: str = "change_me"
    SUPABASE_ANON_KEY: str = ""
    KV_TABLE: str = "kv_store"
    STORAGE_BUCKET: str = "documents"
    HTTP_TIMEOUT: float = 10.0

    # Fichiers
    SIGNED_URL_TTL: int = 3600
    MAX_UPLOAD_MB: int = 50

    # Compte admin unique (bootstrap)
    ADMIN_EMAIL: str = "admin@notes-portal.local"
    ADMIN_PASSWORD: str = "change_me"
    ADMIN_NAME: str = "Admin"

    # Référentiel statique
    DEPARTMENTS: str = "CSE,AI&ML,ISE,CIVIL,MECH,ECE"
    SEMESTERS: str = "1,2,3,4,5,6,7,8"

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def departments(self) -> List[str]:
        return [d.strip() for d in self.DEPARTMENTS.split(",") if d.strip()]

    @property
    def semesters(self) -> List[int]:
        return [int(s) for s in self.SEMESTERS.split(",") if s.strip()]

    @property
    def max_upload_bytes(self) -> int:
        return self.MAX_UPLOAD_MB * 1024 * 1024


@lru_cache
def get_settings() -> Settings:
    return Settings()
