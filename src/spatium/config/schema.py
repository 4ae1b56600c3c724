"""
Pydantic configuration schema for Spatium.

This module defines the configuration models for logging, numeric
tolerances, the randomized self-check and the benchmark, with enum fields,
bounded values and defaults.
"""

from enum import Enum
import uuid

from pydantic import BaseModel, Field, field_validator


class LogLevel(str, Enum):
    """Log level enumeration."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class CheckName(str, Enum):
    """Self-check property enumeration."""

    ROUND_TRIP = "round_trip"
    ASSOCIATIVITY = "associativity"
    IDENTITY = "identity"
    SHORTEST_PATH = "shortest_path"
    SEGMENT_SYMMETRY = "segment_symmetry"
    DEGENERATE_SAFETY = "degenerate_safety"


# ============================================================================
# Sub-configuration Models
# ============================================================================


class ProjectConfig(BaseModel):
    """Project-level configuration."""

    name: str = Field(default="Spatium", description="Project name")
    run_id: str = Field(
        default="auto",
        validate_default=True,
        description="Run identifier (auto generates UUID)",
    )
    log_level: LogLevel = Field(default=LogLevel.WARNING, description="Logging level")
    json_logs: bool = Field(default=False, description="Render logs as JSON lines")

    @field_validator("run_id", mode="before")
    @classmethod
    def generate_run_id(cls, v: str) -> str:
        """Generate UUID if run_id is 'auto'."""
        if v == "auto":
            return str(uuid.uuid4())[:8]
        return v


class ToleranceConfig(BaseModel):
    """Numeric tolerances used when comparing results."""

    normalization: float = Field(
        default=1.0e-6, gt=0, description="Allowed deviation from unit length"
    )
    round_trip: float = Field(
        default=1.0e-4, gt=0, description="Allowed error after a conversion round trip"
    )
    associativity: float = Field(
        default=1.0e-3, gt=0, description="Allowed error between composition orders"
    )


class SelfCheckConfig(BaseModel):
    """Randomized self-check configuration."""

    samples: int = Field(default=200, ge=1, le=1_000_000, description="Samples per check")
    seed: int = Field(default=42, ge=0, description="Random seed")
    checks: list[CheckName] = Field(
        default_factory=lambda: list(CheckName), description="Enabled checks"
    )
    max_translation: float = Field(
        default=100.0, gt=0, description="Translation components drawn from +/- this"
    )
    min_scale: float = Field(default=0.5, description="Smallest sampled scale")
    max_scale: float = Field(default=2.0, description="Largest sampled scale")


class BenchmarkConfig(BaseModel):
    """Benchmark configuration."""

    iterations: int = Field(default=10_000, ge=1, description="Timed iterations")
    warmup: int = Field(default=100, ge=0, description="Untimed warmup iterations")


# ============================================================================
# Root Configuration Model
# ============================================================================


class SpatiumConfig(BaseModel):
    """Root configuration model for Spatium."""

    project: ProjectConfig = Field(default_factory=ProjectConfig)
    tolerances: ToleranceConfig = Field(default_factory=ToleranceConfig)
    selfcheck: SelfCheckConfig = Field(default_factory=SelfCheckConfig)
    benchmark: BenchmarkConfig = Field(default_factory=BenchmarkConfig)

    model_config = {"extra": "forbid"}
