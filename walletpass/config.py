from pydantic_settings import BaseSettings
from pydantic import field_validator
from functools import lru_cache
from typing import Optional, List


class Settings(BaseSettings):
    # Google Wallet issuer, used when no issuer id is passed to the builder
    GOOGLE_WALLET_ISSUER_ID: str = ""

    # Service account used to sign "save to wallet" tokens
    GOOGLE_WALLET_SERVICE_ACCOUNT_EMAIL: Optional[str] = None
    GOOGLE_WALLET_SERVICE_ACCOUNT_KEY: Optional[str] = None  # JSON bundle or PEM string
    GOOGLE_WALLET_SERVICE_ACCOUNT_KEY_PATH: Optional[str] = None  # Path to JSON bundle or PEM file
    GOOGLE_WALLET_SIGNING_ALGORITHM: str = "RS256"

    # Save link
    GOOGLE_WALLET_SAVE_URL: str = "https://pay.google.com/gp/v/save"
    GOOGLE_WALLET_ORIGINS: List[str] = []

    # Language tag for every localized string
    GOOGLE_WALLET_DEFAULT_LANGUAGE: str = "en-US"

    @field_validator("GOOGLE_WALLET_SAVE_URL", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """The token is appended after a single slash."""
        if v and v.endswith("/"):
            return v.rstrip("/")
        return v

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Allow extra env variables to be ignored


@lru_cache()
def get_settings() -> Settings:
    return Settings()
