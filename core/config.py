import tempfile
from functools import lru_cache
from pydantic_settings import BaseSettings
from pydantic import Field
from typing import List, Optional


class Settings(BaseSettings):
    app_name: str = "MIQ Study Assistant API"
    environment: str = Field(default="development")

    # OpenAI
    openai_api_key: str = Field(default="")
    chat_model: str = Field(default="gpt-4o-mini")

    # CORS (the widget origin)
    origin: str = Field(default="https://apollo235298.github.io")

    # Admin
    admin_token: Optional[str] = None

    # Vector store (env override wins over the persisted config file)
    vector_store_id: Optional[str] = None
    vector_store_name: str = "ENGAGING-CULTURE"
    default_course: str = "ENGAGING-CULTURE"
    config_path: str = "config.json"

    # File Upload Settings
    upload_dir: str = Field(default_factory=tempfile.gettempdir)
    max_file_size_mb: int = 25
    allowed_extensions: List[str] = [".pdf"]
    max_json_body_mb: int = 10

    # Server
    port: int = 3000
    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    return Settings()
