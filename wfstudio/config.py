from typing import List

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="WFSTUDIO_")

    # executor and workflow store share one host in the default deployment
    executor_url: str = "http://localhost:8080"
    store_url: str = "http://localhost:8080"
    request_timeout: float = 300.0
    credentials_path: str = "~/.wfstudio/api_keys.json"

    # workflow store service
    database_url: str = "sqlite:///./workflows.db"
    server_host: str = "0.0.0.0"
    server_port: int = 8080
    cors_origins: List[str] = ["http://localhost:5173", "http://localhost:3000"]


settings = Settings()  # reads from env
