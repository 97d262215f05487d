from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

TASK_REPO_BACKENDS = ("mongo", "sql", "file")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Document store (the production backend)
    mongodb_url: str = Field("mongodb://127.0.0.1:27017", validation_alias="MONGODB_URL")
    mongodb_database: str = Field("task-management-app", validation_alias="MONGODB_DATABASE")
    mongodb_collection: str = Field("tasks", validation_alias="MONGODB_COLLECTION")
    mongodb_timeout_ms: int = Field(5000, validation_alias="MONGODB_TIMEOUT_MS")

    # Backend selector: mongo | sql | file
    task_repo_backend: str = Field("mongo", validation_alias="TASK_REPO_BACKEND")

    # SQL backend
    database_url: str = Field("sqlite:///./tasks.db", validation_alias="DATABASE_URL")

    # File backend root; documents land under <root>/tasks/
    workspace_root: str = Field("./data", validation_alias="WORKSPACE_ROOT")

    host: str = Field("0.0.0.0", validation_alias="HOST")
    port: int = Field(3399, validation_alias="PORT")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    reload: bool = Field(False, validation_alias="APP_RELOAD")


@lru_cache()
def get_settings() -> Settings:
    return Settings()
