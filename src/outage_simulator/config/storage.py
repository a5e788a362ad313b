"""Electric (battery) and hydrogen storage specifications."""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from outage_simulator.errors import ConfigurationError


class BatteryConfig(BaseModel):
    """Battery energy storage available during an outage.

    ``size_kw`` and ``size_kwh`` must be given together.  When neither is set
    the battery is absent.
    """

    size_kw: float | None = Field(default=None, ge=0, description="Inverter power rating (kW)")
    size_kwh: float | None = Field(default=None, ge=0, description="Usable energy capacity (kWh)")
    charge_efficiency: float = Field(
        default=0.948, gt=0, le=1.0,
        description="Increase in SOC / energy into the battery",
    )
    discharge_efficiency: float = Field(
        default=0.948, gt=0, le=1.0,
        description="Energy out of the battery / reduction in SOC",
    )
    starting_soc_series_fraction: list[float] | None = Field(
        default=None,
        description="SOC (fraction of size_kwh) for every time step of normal "
                    "grid-connected operation.  None → fully charged.",
    )
    minimum_soc_fraction: float = Field(
        default=0.0, ge=0, lt=1.0,
        description="Lowest SOC allowed during outages (fraction of size_kwh)",
    )
    operational_availability: float = Field(
        default=0.97, ge=0, le=1.0,
        description="Chance the battery is available at outage start",
    )
    num_bins: int | None = Field(
        default=None, ge=1,
        description="SOC discretisation.  None → 20 bins per hour of duration.",
    )
    microgrid_upgraded: bool = Field(
        default=False,
        description="Battery participates when SimulationConfig.microgrid_only is set",
    )

    @model_validator(mode="after")
    def _check_sizes(self) -> BatteryConfig:
        if self.size_kw is not None and self.size_kwh is None:
            raise ConfigurationError("Battery kW provided to reliability inputs but no kWh provided.")
        if self.size_kwh is not None and self.size_kw is None:
            raise ConfigurationError("Battery kWh provided to reliability inputs but no kW provided.")
        return self

    @property
    def is_present(self) -> bool:
        return bool(self.size_kw)


class HydrogenConfig(BaseModel):
    """Hydrogen storage: electrolyzer charges, fuel cell discharges.

    Structurally the same as :class:`BatteryConfig` but with separate charge
    and discharge power ratings.
    """

    size_kwh: float = Field(default=0.0, ge=0, description="H2 storage energy capacity (kWh)")
    electrolyzer_size_kw: float = Field(default=0.0, ge=0, description="Charging power limit (kW)")
    fuelcell_size_kw: float = Field(default=0.0, ge=0, description="Discharging power limit (kW)")
    charge_efficiency: float = Field(default=1.0, gt=0, le=1.0)
    discharge_efficiency: float = Field(default=1.0, gt=0, le=1.0)
    starting_soc_series_fraction: list[float] | None = Field(
        default=None,
        description="SOC (fraction of size_kwh) per time step.  None → full.",
    )
    num_bins: int | None = Field(
        default=None, ge=1,
        description="SOC discretisation.  None → 20 bins per hour of fuel-cell duration.",
    )
    microgrid_upgraded: bool = Field(default=False)

    @model_validator(mode="after")
    def _check_sizes(self) -> HydrogenConfig:
        if self.size_kwh > 0 and self.fuelcell_size_kw == 0:
            raise ConfigurationError("Hydrogen storage kWh provided but no fuel cell kW provided.")
        return self

    @property
    def is_present(self) -> bool:
        return self.size_kwh > 0 and self.fuelcell_size_kw > 0
