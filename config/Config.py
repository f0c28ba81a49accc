# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-08
# Updated: 2026-01-24
# Description: Config
# -----------------------------------------------------------------------------

import os
from dataclasses import dataclass
from dotenv import load_dotenv, find_dotenv

# Load .env once globally (existing env vars win, so tests can override)
load_dotenv(find_dotenv(usecwd=True), override=False)


@dataclass(frozen=True)
class Config:
    # OpenAI (embeddings + chat)
    openai_api_key: str
    openai_base_url: str
    openai_embed_model: str
    openai_chat_model: str

    # Embedding store document on local disk
    store_path: str

    # ---- Single source of truth: field_name -> ENV VAR NAME ----
    ENV_VARS = {
        "openai_api_key": "OPENAI_API_KEY",
        "openai_base_url": "OPENAI_BASE_URL",        # e.g. https://api.openai.com/v1
        "openai_embed_model": "OPENAI_EMBED_MODEL",
        "openai_chat_model": "OPENAI_CHAT_MODEL",
        "store_path": "NAV_STORE_PATH",
    }

    # Defaults for optional fields; anything not listed here is required
    DEFAULTS = {
        "openai_base_url": "",
        "openai_embed_model": "text-embedding-3-small",
        "openai_chat_model": "gpt-4o",
        "store_path": "./data/embeddings/embeddings.json",
    }

    OPENAI_ENV_VARS = (
        "OPENAI_API_KEY",
        "OPENAI_EMBED_MODEL",
        "OPENAI_CHAT_MODEL",
    )

    @staticmethod
    def env_value(field_name: str) -> str:
        """Resolve one field from env or its default, without validating the rest."""
        env_name = Config.ENV_VARS[field_name]
        return (os.getenv(env_name) or Config.DEFAULTS.get(field_name, "")).strip()

    @staticmethod
    def from_env() -> "Config":
        """Build Config object from environment variables."""
        kwargs = {field_name: Config.env_value(field_name) for field_name in Config.ENV_VARS}
        return Config(**kwargs)

    def __post_init__(self):
        """
        Fail fast if any required config is missing.
        """
        missing_fields = [
            k for k, v in self.__dict__.items()
            if not v and k not in self.DEFAULTS
        ]

        if missing_fields:
            missing_env_vars = [self.ENV_VARS[f] for f in missing_fields]
            raise ValueError(f"Missing required environment variables: {missing_env_vars}")

    def summary(self) -> dict:
        """Return a safe, non-sensitive summary for logging."""
        return {
            "openai_base_url": self.openai_base_url or "https://api.openai.com/v1",
            "openai_embed_model": self.openai_embed_model,
            "openai_chat_model": self.openai_chat_model,
            "store_path": self.store_path,
            "openai_api_key_prefix": f"{self.openai_api_key[:4]}..." if self.openai_api_key else None,
        }
