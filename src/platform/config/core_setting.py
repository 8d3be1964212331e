from pathlib import Path
from typing import Annotated, List

import orjson
from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_PATH = _PROJECT_ROOT / '.env'
_ENV_FILE = _ENV_PATH if _ENV_PATH.exists() else (_PROJECT_ROOT / '.env.example')


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_ignore_empty=True,
        extra='ignore',
    )

    PROJECT_NAME: str = 'CineVerse Booking Client'
    VERSION: str = '0.1.0'
    DEBUG: bool = True  # Set to False in production
    LOG_TIMEZONE: str = 'UTC'

    # REST collaborators
    API_BASE_URL: str = 'http://localhost:8080/api'
    HTTP_TIMEOUT_SECONDS: float = 10.0

    # Live seat updates (SSE stream per show topic)
    LIVE_UPDATE_BASE_URL: str = 'http://localhost:8080/ws'
    LIVE_RECONNECT_DELAY_SECONDS: float = 5.0
    LIVE_EVENT_BUFFER_SIZE: int = 100

    # Durable session record (single canonical location)
    SESSION_STORE_PATH: Path = _PROJECT_ROOT / '.session' / 'session.json'

    # Route targets
    AUTH_ROUTE: str = '/auth'
    GUEST_HOME_ROUTE: str = '/'
    USER_HOME_ROUTE: str = '/home'
    ADMIN_HOME_ROUTE: str = '/admin'

    # Seating geometry fallback when a theater has no layout
    DEFAULT_ROWS: int = 10
    DEFAULT_SEATS_PER_ROW: int = 12
    DEFAULT_AISLES: Annotated[List[int], NoDecode] = [6]

    @field_validator('DEFAULT_AISLES', mode='before')
    @classmethod
    def assemble_default_aisles(cls, v: str | List[int]) -> List[int]:
        if isinstance(v, str) and v.startswith('['):
            return [int(i) for i in orjson.loads(v)]
        elif isinstance(v, str):
            return [int(i.strip()) for i in v.split(',') if i.strip()]
        elif isinstance(v, list):
            return v
        return [6]

    @field_validator('API_BASE_URL', 'LIVE_UPDATE_BASE_URL')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip('/')


settings = Settings()  # type: ignore
