"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Registry, presupuestos de reintento y nombres de scripts se leen igual
  desde la CLI, los servicios y los tests.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.models import RetryPolicy


class AppSettings(BaseSettings):
    """Central application settings.

    Every field can be overridden with a `DEPLOY_CHECK_<FIELD>` environment
    variable or a `.env` file in the working directory.
    """

    model_config = SettingsConfigDict(
        env_prefix="DEPLOY_CHECK_",
        extra="ignore",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout per request (seconds).",
    )
    user_agent: str = Field(
        default="deploy-check/0.1",
        min_length=1,
        description="User-Agent sent with liveness and registry probes.",
    )

    registry_base_url: str = Field(
        default="https://registry.npmjs.org",
        min_length=8,
        description="Package registry queried as {base}/{name}/{version}.",
    )
    internal_prefix: str = Field(
        default="@remix-run",
        min_length=1,
        description="Namespace prefix of dependencies owned by this project.",
    )

    liveness_delay_ms: int = Field(
        default=10_000,
        gt=0,
        description="Delay between liveness attempts (milliseconds).",
    )
    liveness_max_attempts: int = Field(
        default=10,
        ge=1,
        description="Liveness attempts before giving up.",
    )
    registry_delay_ms: int = Field(
        default=5_000,
        gt=0,
        description="Delay between registry attempts for one package (milliseconds).",
    )
    registry_max_attempts: int = Field(
        default=4,
        ge=1,
        description="Registry attempts per package before giving up.",
    )
    registry_max_concurrency: int | None = Field(
        default=None,
        ge=1,
        le=500,
        description="Optional cap on concurrent registry probes (None = unbounded).",
    )

    base_url_env_var: str = Field(
        default="CYPRESS_BASE_URL",
        min_length=1,
        description="Environment variable that carries the target URL to the test runner.",
    )
    npm_command: str = Field(
        default="npm",
        min_length=1,
        description="Executable used to invoke package scripts.",
    )
    dev_test_script: str = Field(
        default="test:e2e:run",
        min_length=1,
        description="Script that starts the dev server, waits for it and runs the tests.",
    )
    prod_test_script: str = Field(
        default="cy:run",
        min_length=1,
        description="Script that runs the tests against an already deployed target.",
    )

    apps_dir: Path = Field(
        default=Path("apps"),
        description="Directory where generated apps are scaffolded.",
    )

    log_level: str = Field(
        default="INFO",
        description="Minimum log level (DEBUG, INFO, WARNING, ...).",
    )
    log_json: bool = Field(
        default=False,
        description="Render logs as JSON lines (CI) instead of the console renderer.",
    )

    def liveness_policy(self) -> RetryPolicy:
        return RetryPolicy(delay_ms=self.liveness_delay_ms, max_attempts=self.liveness_max_attempts)

    def registry_policy(self) -> RetryPolicy:
        return RetryPolicy(delay_ms=self.registry_delay_ms, max_attempts=self.registry_max_attempts)
