from functools import lru_cache
from typing import List, Optional
import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class BaseConfig(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

class GlobalConfig(BaseConfig):
    MONGODB_URI: str = "mongodb://localhost:27017"
    MONGODB_DB_NAME: str = "linkedin"

    # Pagination: base URL for first/prev/next/last links and page sizes
    PAGINATION_POSTS: Optional[str] = None
    DEFAULT_PAGE_LIMIT: int = 10
    MAX_PAGE_LIMIT: int = 100

    #Backblaze B2 configuration
    B2_KEY_ID: Optional[str] = None
    B2_APPLICATION_KEY: Optional[str] = None
    B2_BUCKET_NAME: Optional[str] = None
    POST_IMAGE_FOLDER: str = "linkedin/postImage"

    CORS_ORIGINS: List[str] = ["*"]

    #Sentry
    SENTRY_DSN: Optional[str] = None

class DevConfig(GlobalConfig):
    model_config = SettingsConfigDict(env_prefix="DEV_", extra="ignore")

class ProdConfig(GlobalConfig):
    # Try multiple environment variable names for better deployment platform compatibility
    MONGODB_URI: str = Field(
        default="mongodb://localhost:27017",
        validation_alias="MONGODB_URI"
    )
    PAGINATION_POSTS: Optional[str] = Field(default=None, validation_alias="PAGINATION_POSTS")

    B2_KEY_ID: Optional[str] = Field(default=None, validation_alias="B2_KEY_ID")
    B2_APPLICATION_KEY: Optional[str] = Field(default=None, validation_alias="B2_APPLICATION_KEY")
    B2_BUCKET_NAME: Optional[str] = Field(default=None, validation_alias="B2_BUCKET_NAME")

    SENTRY_DSN: Optional[str] = Field(default=None, validation_alias="SENTRY_DSN")

    model_config = SettingsConfigDict(extra="ignore")

    def model_post_init(self, __context):
        # Most hosted Mongo providers hand out MONGO_URL; fall back to prefixed names after that
        if not os.getenv("MONGODB_URI"):
            self.MONGODB_URI = os.getenv("MONGO_URL") or os.getenv("PROD_MONGODB_URI") or self.MONGODB_URI
        if not self.PAGINATION_POSTS:
            self.PAGINATION_POSTS = os.getenv("PROD_PAGINATION_POSTS")
        if not self.B2_KEY_ID:
            self.B2_KEY_ID = os.getenv("PROD_B2_KEY_ID")
        if not self.B2_APPLICATION_KEY:
            self.B2_APPLICATION_KEY = os.getenv("PROD_B2_APPLICATION_KEY")
        if not self.B2_BUCKET_NAME:
            self.B2_BUCKET_NAME = os.getenv("PROD_B2_BUCKET_NAME")
        if not self.SENTRY_DSN:
            self.SENTRY_DSN = os.getenv("PROD_SENTRY_DSN")

class TestConfig(GlobalConfig):
    MONGODB_DB_NAME: str = "linkedin_test"
    PAGINATION_POSTS: Optional[str] = "http://testserver/posts"
    DEFAULT_PAGE_LIMIT: int = 2
    MAX_PAGE_LIMIT: int = 50

    model_config = SettingsConfigDict(env_prefix="TEST_", extra="ignore")

@lru_cache()
def get_config(env_state: str):
    configs = {"dev": DevConfig, "test": TestConfig, "prod": ProdConfig}
    return configs[env_state]()

# Prefer test config automatically when running under pytest unless ENV is set
detected_env = os.getenv("ENV")
if not detected_env and os.getenv("PYTEST_CURRENT_TEST"):
    detected_env = "test"
env_state = detected_env or "prod"
config = get_config(env_state)
