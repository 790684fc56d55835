from __future__ import annotations

from typing import List, Union
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, AliasChoices
import json


def _parse_groups(value: Union[str, List[str], None]) -> List[str]:
    if value is None:
        return []
    if isinstance(value, list):
        return [str(x).strip() for x in value if str(x).strip()]
    v = value.strip()
    if not v:
        return []
    if v.startswith("["):
        try:
            arr = json.loads(v)
        except json.JSONDecodeError:
            return []
        return [str(x).strip() for x in arr if str(x).strip()] if isinstance(arr, list) else []
    return [x.strip() for x in v.split(",") if x.strip()]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Admissions service
    ADMISSIONS_API_URL: str = Field(
        default="http://localhost:8080",
        validation_alias=AliasChoices("ADMISSIONS_API_URL", "admissions_api_url", "API_URL"),
    )
    ADMISSIONS_API_VERSION: str = "v1"

    # HTTP
    HTTP_TIMEOUT_SECONDS: float = 10.0
    HTTP_CONNECT_TIMEOUT_SECONDS: float = 5.0
    AUTH_MAX_RETRIES: int = Field(default=0, ge=0, le=5)  # only transport errors on /jwt

    # Actors
    VIEWER_EMAIL: str = "john.doe@dsh.ca.gov"
    VIEWER_GROUPS: Union[str, List[str], None] = None
    ADMIN_EMAIL: str = "admin@dsh.ca.gov"
    ADMIN_GROUPS: Union[str, List[str], None] = None

    # Misc
    LOG_LEVEL: str = "INFO"

    def model_post_init(self, *_):
        self.ADMISSIONS_API_URL = self.ADMISSIONS_API_URL.rstrip("/")
        self.VIEWER_GROUPS = _parse_groups(self.VIEWER_GROUPS)
        self.ADMIN_GROUPS = _parse_groups(self.ADMIN_GROUPS)

    @property
    def api_prefix(self) -> str:
        return f"/api/{self.ADMISSIONS_API_VERSION}"


settings = Settings()
