"""Backup generator fleet — one entry per generator *type*."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, model_validator

from outage_simulator.errors import ConfigurationError

# Per-type fields and the default used when a field is omitted.
_PER_TYPE_DEFAULTS: dict[str, Any] = {
    "generator_size_kw": 0.0,
    "operational_availability": 0.995,
    "failure_to_start": 0.0094,
    "mean_time_to_failure": 1100.0,
    "fuel_burn_rate_per_kwh": 0.076,
    "fuel_intercept_per_hr": 0.0,
    "fuel_limit": 1e9,
    "fuel_limit_is_per_generator": False,
}


class GeneratorFleet(BaseModel):
    """Ordered list of generator types.

    Every per-type field accepts either a list (one value per type) or a
    scalar, which is broadcast to every type.  Omitted fields take their
    default for every type.  Lists must all match ``len(num_generators)``.
    """

    num_generators: list[int] = Field(
        default_factory=lambda: [1],
        description="Units installed, per generator type",
    )
    generator_size_kw: list[float] = Field(
        default_factory=lambda: [0.0],
        description="Nameplate output of one unit (kW), per type",
    )
    operational_availability: list[float] = Field(
        default_factory=lambda: [0.995],
        description="Chance a unit is not down for maintenance at outage start",
    )
    failure_to_start: list[float] = Field(
        default_factory=lambda: [0.0094],
        description="Chance an available unit fails to start and take load",
    )
    mean_time_to_failure: list[float] = Field(
        default_factory=lambda: [1100.0],
        description="Mean time steps between failures while running; "
                    "per-step failure probability = 1 / MTTF",
    )
    fuel_burn_rate_per_kwh: list[float] = Field(
        default_factory=lambda: [0.076],
        description="Fuel consumed per kWh generated",
    )
    fuel_intercept_per_hr: list[float] = Field(
        default_factory=lambda: [0.0],
        description="Fuel consumed per hour while idling, per unit",
    )
    fuel_limit: list[float] = Field(
        default_factory=lambda: [1e9],
        description="Fuel available, per type or per unit "
                    "(see fuel_limit_is_per_generator)",
    )
    fuel_limit_is_per_generator: list[bool] = Field(
        default_factory=lambda: [False],
        description="True → fuel_limit is per unit and is multiplied by the unit count",
    )

    @model_validator(mode="before")
    @classmethod
    def _broadcast_scalars(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        num = data.get("num_generators", [1])
        if not isinstance(num, (list, tuple)):
            num = [num]
        data["num_generators"] = list(num)
        n_types = len(num)
        for name, default in _PER_TYPE_DEFAULTS.items():
            value = data.get(name, default)
            if not isinstance(value, (list, tuple)):
                value = [value] * n_types
            data[name] = list(value)
        return data

    @model_validator(mode="after")
    def _check_fleet(self) -> GeneratorFleet:
        n_types = len(self.num_generators)
        if n_types == 0:
            raise ConfigurationError("At least one generator type is required.")
        mismatched = [
            name for name in _PER_TYPE_DEFAULTS
            if len(getattr(self, name)) != n_types
        ]
        if mismatched:
            raise ConfigurationError(
                f"Per-type generator inputs {mismatched} must have the same "
                f"length as num_generators ({n_types})."
            )
        if any(n < 0 for n in self.num_generators):
            raise ConfigurationError("num_generators cannot be negative.")
        if any(s < 0 for s in self.generator_size_kw):
            raise ConfigurationError("generator_size_kw cannot be negative.")
        for name in ("operational_availability", "failure_to_start"):
            if any(not 0.0 <= v <= 1.0 for v in getattr(self, name)):
                raise ConfigurationError(f"{name} must lie in [0, 1].")
        if any(m <= 0 for m in self.mean_time_to_failure):
            raise ConfigurationError("mean_time_to_failure must be positive.")
        if any(p > 1.0 for p in self.failure_probability):
            raise ConfigurationError(
                "mean_time_to_failure below one time step gives a per-step "
                f"failure probability above 1: {self.mean_time_to_failure}."
            )
        return self

    # ── Derived ─────────────────────────────────────────────────────────

    @property
    def num_types(self) -> int:
        return len(self.num_generators)

    @property
    def failure_probability(self) -> list[float]:
        """Per-step failure-to-run probability, 1 / MTTF."""
        return [1.0 / m for m in self.mean_time_to_failure]

    @property
    def total_capacity_kw(self) -> float:
        return sum(n * s for n, s in zip(self.num_generators, self.generator_size_kw))
