"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All configuration is read from CALLBRIDGE_* env vars (or a .env file)."""

    # --- Timeouts (seconds) ---
    http_step_timeout: float = 5.0
    rendezvous_deadline: float = 30.0

    # --- Google Voice endpoints ---
    pre_login_url: str = "https://www.google.com/accounts/ServiceLogin"
    login_url: str = "https://www.google.com/accounts/ServiceLoginAuth?service=grandcentral"
    voice_home_url: str = "https://www.google.com/voice"
    voice_call_url: str = "https://www.google.com/voice/call/connect"

    # --- Callback matching ---
    # Number of leading dial-prefix characters stripped from the forwarding
    # number before comparing it with the inbound To user.
    forwarding_prefix_length: int = 1
    callback_marker_header: str = "X-GoogleVoice"
    callback_marker_value: str = "true"

    # --- Account ---
    account_owner: str = ""
    admin_member_id: str = ""

    log_level: str = "INFO"

    model_config = {
        "env_prefix": "CALLBRIDGE_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }


def get_settings() -> Settings:
    """Return a settings instance."""
    return Settings()
