from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import os

from account_messages.constants import ENTITY_TASK_QUEUE


@dataclass(frozen=True)
class Settings:
    """Runtime configuration for the worker and the HTTP front-end.

    Workflow code never reads these: environment lookups are not replay-safe.
    """

    app_name: str = "user-account-service"
    version: str = "0.1.0"
    temporal_host_port: str = os.getenv("TEMPORAL_CLIENT_HOSTPORT", "localhost:7233")
    temporal_namespace: str = os.getenv("TEMPORAL_CLIENT_NAMESPACE", "default")
    temporal_tls_cert_path: str = os.getenv("TEMPORAL_CLIENT_CERT_PATH", "")
    temporal_tls_key_path: str = os.getenv("TEMPORAL_CLIENT_KEY_PATH", "")
    task_queue: str = os.getenv("TEMPORAL_TASK_QUEUE", ENTITY_TASK_QUEUE)
    http_host: str = os.getenv("HTTP_HOST", "0.0.0.0")
    http_port: int = int(os.getenv("HTTP_PORT", "8081"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

    @property
    def tls_enabled(self) -> bool:
        cert = self.temporal_tls_cert_path.strip()
        key = self.temporal_tls_key_path.strip()
        if bool(cert) != bool(key):
            raise ValueError("TEMPORAL_CLIENT_CERT_PATH and TEMPORAL_CLIENT_KEY_PATH must be set together")
        return bool(cert)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached Settings instance for the running process."""
    return Settings()
