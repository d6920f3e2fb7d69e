from __future__ import annotations

import os
from functools import lru_cache
from typing import List

from dotenv import load_dotenv, find_dotenv

_env_path = find_dotenv(".env") or ".env"
load_dotenv(_env_path, override=False)

_DEFAULT_ORIGINS = "http://localhost:5173,http://localhost:8080,http://127.0.0.1:5173,http://127.0.0.1:8080"


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() == "true"


def _env_csv(name: str, default: str = "") -> List[str]:
    raw = os.getenv(name, default)
    return [item.strip().rstrip("/") for item in raw.split(",") if item.strip()]


class Settings:
    """Central configuration (env driven)."""

    def __init__(self) -> None:
        # Supabase project
        self.supabase_url: str = os.getenv("SUPABASE_URL", "").rstrip("/")
        self.supabase_anon_key: str = os.getenv("SUPABASE_ANON_KEY") or os.getenv("SUPABASE_KEY", "")
        self.supabase_key: str = self.supabase_anon_key  # alias
        self.supabase_service_role_key: str = (
            os.getenv("SUPABASE_SERVICE_ROLE_KEY") or os.getenv("SUPABASE_SERVICE_KEY") or ""
        )
        self.query_timeout: float = float(os.getenv("SUPABASE_QUERY_TIMEOUT", "5"))

        # Accounts: register numbers and admin usernames map onto synthetic emails
        self.student_email_domain: str = os.getenv("STUDENT_EMAIL_DOMAIN", "student.elitecontest.app")
        self.teacher_email_domain: str = os.getenv("TEACHER_EMAIL_DOMAIN", "teacher.elitecontest.app")
        self.min_password_length: int = int(os.getenv("MIN_PASSWORD_LENGTH", "6"))

        # App meta
        self.app_name: str = "Contest Tracker"
        self.app_version: str = os.getenv("APP_VERSION", "dev")
        self.debug: bool = _env_bool("DEBUG")
        self.allow_origins: List[str] = _env_csv("ALLOW_ORIGINS", _DEFAULT_ORIGINS)

        # Cookie/session configuration
        self.cookie_domain: str | None = os.getenv("COOKIE_DOMAIN") or None
        self.cookie_secure: bool = os.getenv("COOKIE_SECURE", "true").lower() != "false"
        self.cookie_samesite: str = os.getenv("COOKIE_SAMESITE", "lax").capitalize()  # Lax|Strict|None

    @property
    def auth_base(self) -> str | None:
        return f"{self.supabase_url}/auth/v1" if self.supabase_url else None

    @property
    def configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    def student_email(self, register_number: str) -> str:
        return f"{register_number.strip().lower()}@{self.student_email_domain}"

    def teacher_email(self, username: str) -> str:
        return f"{username.strip().lower()}@{self.teacher_email_domain}"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
