"""On-site PV available during an outage."""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from outage_simulator.errors import ConfigurationError


class PVConfig(BaseModel):
    """PV output during an outage.

    Give either ``ac_output_kw_series`` directly, or ``size_kw`` together
    with ``production_factor_series`` (kW per kW installed).
    """

    size_kw: float = Field(default=0.0, ge=0, description="Installed PV capacity (kW AC)")
    production_factor_series: list[float] | None = Field(
        default=None, description="Per-time-step production per kW installed",
    )
    ac_output_kw_series: list[float] | None = Field(
        default=None, description="Per-time-step AC output (kW); overrides size × factor",
    )
    operational_availability: float = Field(
        default=0.98, ge=0, le=1.0,
        description="Chance PV is available at outage start",
    )
    can_dispatch_without_battery: bool = Field(
        default=False,
        description="PV can serve load when the battery is unavailable",
    )
    microgrid_upgraded: bool = Field(
        default=False,
        description="PV participates when SimulationConfig.microgrid_only is set",
    )

    @model_validator(mode="after")
    def _check_series(self) -> PVConfig:
        if self.size_kw > 0 and self.production_factor_series is None and self.ac_output_kw_series is None:
            raise ConfigurationError(
                "Non-zero pv_size_kw is included in inputs but no "
                "pv_production_factor_series is provided."
            )
        return self

    def output_series_kw(self) -> list[float] | None:
        """AC output per time step, or None when no PV is modeled."""
        if self.ac_output_kw_series is not None:
            return list(self.ac_output_kw_series)
        if self.size_kw > 0 and self.production_factor_series is not None:
            return [self.size_kw * f for f in self.production_factor_series]
        return None
