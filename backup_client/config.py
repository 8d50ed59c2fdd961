# Client settings, read from the environment
import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_API_BASE = "http://localhost:8153/go"
DEFAULT_SLACK_WEBHOOK = "https://hooks.slack.com/services/XXX/YYY/ZZZ"


def _int_or_none(value):
    if value in (None, ""):
        return None
    return int(value)


@dataclass
class Settings:
    api_base: str = DEFAULT_API_BASE
    api_token: Optional[str] = None
    request_timeout: float = 10.0
    max_polls: Optional[int] = None
    slack_webhook: str = DEFAULT_SLACK_WEBHOOK
    notify: bool = False
    metrics_port: Optional[int] = None

    def __post_init__(self):
        if self.max_polls is not None and self.max_polls < 1:
            raise ValueError(f"BACKUP_MAX_POLLS must be at least 1 or unset, got {self.max_polls}")

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            api_base=env.get("BACKUP_API_BASE", DEFAULT_API_BASE).rstrip("/"),
            api_token=env.get("BACKUP_API_TOKEN") or None,
            request_timeout=float(env.get("BACKUP_REQUEST_TIMEOUT", "10")),
            max_polls=_int_or_none(env.get("BACKUP_MAX_POLLS")),
            slack_webhook=env.get("SLACK_WEBHOOK", DEFAULT_SLACK_WEBHOOK),
            notify=env.get("BACKUP_NOTIFY", "0") == "1",
            metrics_port=_int_or_none(env.get("METRICS_PORT")),
        )
