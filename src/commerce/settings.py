"""Runtime settings for the commerce service, read from the environment."""

import os
from dataclasses import dataclass

GATEWAY_SIMULATED = "simulated"
GATEWAY_HTTP = "http"


@dataclass(frozen=True)
class Settings:
    environment: str = "development"
    payment_gateway: str = GATEWAY_SIMULATED
    payment_service_url: str = "http://localhost:8081"
    payment_webhook_url: str = "http://localhost:8000/webhooks/payment"
    payment_delay_seconds: float = 3.0
    payment_success_rate: float = 0.9
    payment_timeout_seconds: float = 5.0
    pending_payment_ttl_minutes: int = 15

    def __post_init__(self) -> None:
        if self.payment_gateway not in (GATEWAY_SIMULATED, GATEWAY_HTTP):
            raise ValueError(f"Unknown payment gateway: {self.payment_gateway}")
        if not 0.0 <= self.payment_success_rate <= 1.0:
            raise ValueError("PAYMENT_SUCCESS_RATE must be between 0 and 1")
        if self.payment_delay_seconds < 0:
            raise ValueError("PAYMENT_DELAY_SECONDS must not be negative")

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            environment=env.get("PROTEAN_ENV", defaults.environment).lower(),
            payment_gateway=env.get("PAYMENT_GATEWAY", defaults.payment_gateway).lower(),
            payment_service_url=env.get("PAYMENT_SERVICE_URL", defaults.payment_service_url).rstrip("/"),
            payment_webhook_url=env.get("PAYMENT_WEBHOOK_URL", defaults.payment_webhook_url),
            payment_delay_seconds=float(env.get("PAYMENT_DELAY_SECONDS", defaults.payment_delay_seconds)),
            payment_success_rate=float(env.get("PAYMENT_SUCCESS_RATE", defaults.payment_success_rate)),
            payment_timeout_seconds=float(env.get("PAYMENT_TIMEOUT_SECONDS", defaults.payment_timeout_seconds)),
            pending_payment_ttl_minutes=int(
                env.get("PAYMENT_PENDING_TTL_MINUTES", defaults.pending_payment_ttl_minutes)
            ),
        )
