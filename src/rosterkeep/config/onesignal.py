"""OneSignal push configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import require_env_vars
from .http_resilience import RateLimit, ResilienceConfig

ONESIGNAL_BASE_URL = "https://onesignal.com/api/v1/"
ONESIGNAL_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class OneSignalConfig:
    """Holds OneSignal REST API credentials."""

    app_id: str
    api_key: str
    resilience: ResilienceConfig


def get_onesignal_config(*, resilience: ResilienceConfig | None = None) -> OneSignalConfig:
    values = require_env_vars(("ONESIGNAL_APP_ID", "ONESIGNAL_REST_API_KEY"))
    return OneSignalConfig(
        app_id=values["ONESIGNAL_APP_ID"],
        api_key=values["ONESIGNAL_REST_API_KEY"],
        resilience=resilience
        or ResilienceConfig(
            name="onesignal",
            base_url=ONESIGNAL_BASE_URL,
            timeout_seconds=ONESIGNAL_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
        ),
    )
