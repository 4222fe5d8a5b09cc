"""Service Configuration - Environment-driven settings for the shell.

Core algorithm constants live beside the code that uses them; only
deployment concerns are read from the environment.
"""

import os
from dataclasses import dataclass, field

from ..core.overage import DEFAULT_FALLBACK_DAILY_BUDGET


@dataclass
class FirestoreConfig:
    """Configuration for Firestore client.

    Attributes:
        project_id: GCP project ID (None for default)
        database: Firestore database name (None for default database)
    """

    project_id: str | None = None
    database: str | None = None

    @classmethod
    def from_env(cls) -> "FirestoreConfig":
        return cls(
            project_id=os.environ.get("FIRESTORE_PROJECT") or None,
            database=os.environ.get("FIRESTORE_DATABASE", "budget-engine"),
        )


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    return int(raw)


@dataclass
class ServiceConfig:
    """Configuration for the HTTP/MCP service.

    Attributes:
        service_token: Bearer token for MCP, the period trigger and the scheduled job (None disables them)
        fallback_daily_budget: Budget served when no weekly period exists
        host: Bind address
        port: Bind port
    """

    service_token: str | None = None
    fallback_daily_budget: int = DEFAULT_FALLBACK_DAILY_BUDGET
    host: str = "0.0.0.0"
    port: int = 8080
    firestore: FirestoreConfig = field(default_factory=FirestoreConfig)

    @classmethod
    def from_env(cls) -> "ServiceConfig":
        return cls(
            service_token=os.environ.get("SERVICE_TOKEN") or None,
            fallback_daily_budget=_int_env("FALLBACK_DAILY_BUDGET", DEFAULT_FALLBACK_DAILY_BUDGET),
            host=os.environ.get("HOST", "0.0.0.0"),
            port=_int_env("PORT", 8080),
            firestore=FirestoreConfig.from_env(),
        )
