"""Configuration loaded from the environment (and a ``.env`` file).

Every variable is read and checked up front; ``Settings.from_env`` raises
one ``ConfigError`` naming all of the bad ones so a misconfigured
deployment fails on start, not on the first request.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from dotenv import load_dotenv

from commerce.infrastructure.auth.jwt_tokens import parse_duration

ENVIRONMENTS = ("development", "production", "test")
LOG_LEVELS = ("fatal", "error", "warn", "info", "debug", "trace")
LOG_FORMATS = ("text", "json")
GATEWAYS = ("simulated", "http")
MIN_JWT_SECRET_LENGTH = 32


class ConfigError(Exception):
    """One or more environment variables are missing or invalid."""

    def __init__(self, problems: list[str]) -> None:
        self.problems = problems
        super().__init__(
            "Invalid configuration:\n" + "\n".join(f"  - {p}" for p in problems)
        )


@dataclass(frozen=True)
class AppConfig:
    name: str
    version: str
    environment: str

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


@dataclass(frozen=True)
class ServerConfig:
    host: str
    port: int


@dataclass(frozen=True)
class DatabaseConfig:
    uri: str
    name: str
    max_pool_size: int = 10
    server_selection_timeout_ms: int = 5000
    socket_timeout_ms: int = 45000


@dataclass(frozen=True)
class SecurityConfig:
    jwt_secret: str
    jwt_expires_in: str
    bcrypt_rounds: int


@dataclass(frozen=True)
class LoggingConfig:
    level: str
    format: str


@dataclass(frozen=True)
class RateLimitConfig:
    window_seconds: int
    max_requests: int


@dataclass(frozen=True)
class GatewayConfig:
    kind: str
    url: str | None
    delay_seconds: float


@dataclass(frozen=True)
class Settings:
    """Application configuration"""

    app: AppConfig
    server: ServerConfig
    database: DatabaseConfig
    security: SecurityConfig
    logging: LoggingConfig
    cors_origin: str
    rate_limit: RateLimitConfig
    gateway: GatewayConfig

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> Settings:
        """Build settings from ``env`` (defaults to ``os.environ`` plus ``.env``)."""
        if env is None:
            load_dotenv()
            env = os.environ
        reader = _EnvReader(env)

        environment = reader.choice(
            "APP_ENV", env.get("NODE_ENV", "development"), ENVIRONMENTS
        )
        port = reader.integer("PORT", 3000, minimum=1, maximum=65535)
        jwt_secret = reader.required("JWT_SECRET")
        if jwt_secret and len(jwt_secret) < MIN_JWT_SECRET_LENGTH:
            reader.problems.append(
                f"JWT_SECRET must be at least {MIN_JWT_SECRET_LENGTH} characters long"
            )
        jwt_expires_in = env.get("JWT_EXPIRES_IN", "7d")
        try:
            parse_duration(jwt_expires_in)
        except ValueError:
            reader.problems.append(
                f"JWT_EXPIRES_IN must be a duration like 7d, 12h, 15m, 30s or 3600 "
                f"(got {jwt_expires_in!r})"
            )
        gateway_kind = reader.choice("PAYMENT_GATEWAY", "simulated", GATEWAYS)
        gateway_url = env.get("PAYMENT_GATEWAY_URL") or None
        if gateway_kind == "http" and not gateway_url:
            reader.problems.append(
                "PAYMENT_GATEWAY_URL is required when PAYMENT_GATEWAY=http"
            )

        settings = cls(
            app=AppConfig(
                name=env.get("APP_NAME", "commerce"),
                version=env.get("APP_VERSION", "1.0.0"),
                environment=environment,
            ),
            server=ServerConfig(host=env.get("HOST", "localhost"), port=port),
            database=DatabaseConfig(
                uri=reader.required("MONGO_URI"),
                name=reader.required("MONGO_DB_NAME"),
            ),
            security=SecurityConfig(
                jwt_secret=jwt_secret,
                jwt_expires_in=jwt_expires_in,
                bcrypt_rounds=reader.integer("BCRYPT_ROUNDS", 12, minimum=4, maximum=31),
            ),
            logging=LoggingConfig(
                level=reader.choice("LOG_LEVEL", "info", LOG_LEVELS),
                format=reader.choice("LOG_FORMAT", "text", LOG_FORMATS),
            ),
            cors_origin=env.get("CORS_ORIGIN", "http://localhost:3000"),
            rate_limit=RateLimitConfig(
                window_seconds=reader.integer("RATE_LIMIT_WINDOW_SECONDS", 900, minimum=1),
                max_requests=reader.integer("RATE_LIMIT_MAX_REQUESTS", 100, minimum=1),
            ),
            gateway=GatewayConfig(
                kind=gateway_kind,
                url=gateway_url,
                delay_seconds=reader.number("PAYMENT_GATEWAY_DELAY_SECONDS", 1.0),
            ),
        )
        if reader.problems:
            raise ConfigError(reader.problems)
        return settings


class _EnvReader:
    """Collects problems instead of failing on the first bad variable."""

    def __init__(self, env: Mapping[str, str]) -> None:
        self._env = env
        self.problems: list[str] = []

    def required(self, name: str) -> str:
        value = self._env.get(name, "").strip()
        if not value:
            self.problems.append(f"{name} is required")
        return value

    def choice(self, name: str, default: str, allowed: tuple[str, ...]) -> str:
        value = self._env.get(name, default).strip().lower()
        if value not in allowed:
            self.problems.append(f"{name} must be one of {', '.join(allowed)} (got {value!r})")
            return default
        return value

    def integer(
        self,
        name: str,
        default: int,
        minimum: int | None = None,
        maximum: int | None = None,
    ) -> int:
        raw = self._env.get(name)
        if raw is None or raw.strip() == "":
            return default
        try:
            value = int(raw)
        except ValueError:
            self.problems.append(f"{name} must be an integer (got {raw!r})")
            return default
        if (minimum is not None and value < minimum) or (
            maximum is not None and value > maximum
        ):
            self.problems.append(f"{name} is out of range (got {value})")
            return default
        return value

    def number(self, name: str, default: float) -> float:
        raw = self._env.get(name)
        if raw is None or raw.strip() == "":
            return default
        try:
            value = float(raw)
        except ValueError:
            self.problems.append(f"{name} must be a number (got {raw!r})")
            return default
        if value < 0:
            self.problems.append(f"{name} must not be negative (got {value})")
            return default
        return value
