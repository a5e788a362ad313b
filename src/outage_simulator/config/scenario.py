"""Top-level scenario — bundles every reliability input."""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from outage_simulator.config.generator import GeneratorFleet
from outage_simulator.config.pv import PVConfig
from outage_simulator.config.storage import BatteryConfig, HydrogenConfig
from outage_simulator.errors import ConfigurationError


class SimulationConfig(BaseModel):
    """Run-level settings."""

    max_outage_duration: int = Field(default=96, ge=1, description="Longest outage modeled (time steps)")
    time_steps_per_hour: float = Field(default=1.0, gt=0, description="Time resolution of every series")
    marginal_survival: bool = Field(
        default=False,
        description="True → chance of surviving at each duration step; "
                    "False → chance of surviving every step up to and including it.",
    )
    microgrid_only: bool = Field(
        default=False,
        description="Only microgrid-upgraded PV / storage run during the outage",
    )
    parallel: bool = Field(default=True, description="Spread start times over a worker pool")
    max_workers: int | None = Field(
        default=None, ge=1,
        description="Worker pool size.  None → ThreadPoolExecutor default.",
    )


class ReliabilityScenario(BaseModel):
    """Complete input bundle for one reliability evaluation."""

    critical_loads_kw: list[float] = Field(min_length=1, description="Critical load per time step (kW)")
    generator: GeneratorFleet = Field(default_factory=GeneratorFleet)
    battery: BatteryConfig = Field(default_factory=BatteryConfig)
    hydrogen: HydrogenConfig = Field(default_factory=HydrogenConfig)
    pv: PVConfig = Field(default_factory=PVConfig)
    simulation: SimulationConfig = Field(default_factory=SimulationConfig)

    @model_validator(mode="after")
    def _check_series_lengths(self) -> ReliabilityScenario:
        n = len(self.critical_loads_kw)
        series = {
            "pv_production_factor_series": self.pv.production_factor_series,
            "pv_ac_output_kw_series": self.pv.ac_output_kw_series,
            "battery_starting_soc_series_fraction": self.battery.starting_soc_series_fraction,
            "hydrogen_starting_soc_series_fraction": self.hydrogen.starting_soc_series_fraction,
        }
        for name, values in series.items():
            if values is not None and len(values) != n:
                raise ConfigurationError(
                    f"The lengths of {name} ({len(values)}) and critical_loads_kw ({n}) do not match."
                )
        return self
