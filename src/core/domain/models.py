"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Validación estricta de presupuestos de reintento y manifests sin acoplar
  el Core a librerías de I/O.
- Serialización directa del `GateReport` a JSON para CI.

Nota:
- Estos modelos describen *qué* es un probe o una ejecución de tests, no
  *cómo* se ejecuta.
"""

from __future__ import annotations

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class RetryPolicy(BaseModel):
    """Constant-delay retry budget for one probe sequence."""

    model_config = ConfigDict(frozen=True)

    delay_ms: int = Field(
        ...,
        gt=0,
        description="Wait between two attempts (milliseconds).",
    )
    max_attempts: int = Field(
        ...,
        ge=1,
        description="Total number of attempts, the first one included.",
    )


class ProbeResult(BaseModel):
    """Terminal outcome of one retry sequence.

    The retry primitive itself raises on exhaustion; this model is what the
    checkers hand back (or attach to their errors) so the CLI can report
    every probe uniformly.
    """

    target: str = Field(
        ...,
        min_length=1,
        description="What was probed (URL or name@version).",
    )
    ok: bool = Field(
        default=False,
        description="Whether the probe eventually succeeded.",
    )
    attempts: int = Field(
        default=0,
        ge=0,
        description="Attempts made before the sequence ended.",
    )
    error: str | None = Field(
        default=None,
        description="Last observed error or status when the probe failed.",
    )


class DependencySpec(BaseModel):
    """One declared dependency of a generated app."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(
        ...,
        min_length=1,
        description="Package name, including its scope (e.g. '@remix-run/node').",
    )
    version_range: str = Field(
        ...,
        description="Version or range as written in the manifest (e.g. '^1.2.3').",
    )


class RunConfig(BaseModel):
    """Which test-run variant executes and against which URL."""

    model_config = ConfigDict(frozen=True)

    target_url: str = Field(..., min_length=1)
    is_development_mode: bool = False

    @property
    def mode(self) -> str:
        return "development" if self.is_development_mode else "production"


class PackageManifest(BaseModel):
    """The subset of `package.json` this tool reads.

    Unknown keys are kept so a validated manifest can still be inspected
    as a whole.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str | None = None
    dependencies: dict[str, str] = Field(default_factory=dict)
    dev_dependencies: dict[str, str] = Field(default_factory=dict, alias="devDependencies")
    scripts: dict[str, str] = Field(default_factory=dict)

    def all_dependencies(self) -> dict[str, str]:
        """Runtime and development dependencies; runtime wins on duplicates."""

        return {**self.dev_dependencies, **self.dependencies}


class GateReport(BaseModel):
    """Summary of one gate run, rendered by the CLI and exportable as JSON."""

    target_url: str = Field(..., min_length=1)
    packages: list[ProbeResult] = Field(default_factory=list)
    liveness: ProbeResult | None = None
    tests_passed: bool | None = Field(
        default=None,
        description="None when the test stage did not run.",
    )
