# onward_app/config/settings.py

import os

class Settings:
    # Chat assistant upstream (Anthropic Messages API)
    llm_api_endpoint: str = os.getenv("LLM_API_ENDPOINT", "https://api.anthropic.com/v1/messages")
    llm_api_key: str      = os.getenv("LLM_API_KEY", "")
    llm_model_name: str   = os.getenv("LLM_MODEL_NAME", "claude-3-haiku-20240307")
    llm_api_version: str  = os.getenv("LLM_API_VERSION", "2023-06-01")
    llm_max_tokens: int   = int(os.getenv("LLM_MAX_TOKENS", "1024"))
    llm_timeout_sec: float = float(os.getenv("LLM_TIMEOUT_SEC", "30"))

    # Database URL used by SQLAlchemy
    db_connection_string: str = os.getenv(
        "DATABASE_URL",
        "sqlite:///./onward.db"
    )

    api_version: str = os.getenv("API_VERSION", "1.0.0")

settings = Settings()
