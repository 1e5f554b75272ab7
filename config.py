"""Environment-driven configuration for the app."""

import os
from dataclasses import dataclass

TBA_BASE_URL = 'https://www.thebluealliance.com/api/v3'


@dataclass(frozen=True)
class Config:
    """Settings that come from the process environment, not the user."""

    tba_base_url: str = TBA_BASE_URL
    default_api_key: str = ''  # used when the user has not set a key
    request_timeout: float = 15.0
    refresh_interval: float = 5 * 60.0
    log_level: str = 'INFO'
    port: int = 7000

    @classmethod
    def from_env(cls) -> 'Config':
        """Create a Config from environment variables with defaults."""

        return cls(
            tba_base_url=os.environ.get('TBA_BASE_URL', cls.tba_base_url),
            default_api_key=os.environ.get('TBA_DEFAULT_API_KEY',
                                           cls.default_api_key),
            request_timeout=float(
                os.environ.get('TBA_TIMEOUT', cls.request_timeout)),
            refresh_interval=float(
                os.environ.get('REFRESH_INTERVAL', cls.refresh_interval)),
            log_level=os.environ.get('LOG_LEVEL', cls.log_level),
            port=int(os.environ.get('PORT', cls.port)),
        )
