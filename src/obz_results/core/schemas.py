"""Pydantic schemas for configuration and metadata."""

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class ResultFilter(BaseModel):
    """Selection of result rows handed to the rendering layer.

    Empty lists select everything.
    """

    assets: list[str] = Field(default_factory=list)
    years: list[int] = Field(default_factory=list)
    rep_periods: list[int] = Field(default_factory=list)


class PostprocessConfig(BaseModel):
    """Post-processing run configuration."""

    run_id: str = Field(default="postprocess", description="Run identifier")
    output_format: Literal["parquet", "csv"] = Field(default="parquet")
    include_inter_storage: bool = Field(
        default=True, description="Compute inter-period SoC when the table exists"
    )
    balance_tolerance: float = Field(
        default=1e-3, gt=0, description="Absolute tolerance for balance closure checks"
    )
    filters: ResultFilter = Field(default_factory=ResultFilter)


class InputDefaults(BaseModel):
    """Default values for model input columns.

    Applied to user input files during normalization: absent columns are
    created with these values and nulls are filled with them. Fields set to
    None have no default and stay null.
    """

    default_year: int = Field(default=2050, gt=0)

    active: bool = True
    capacity: float = Field(default=0.0, ge=0)
    capacity_storage_energy: float = Field(default=0.0, ge=0)
    carrier: str = "electricity"
    milestone_year: Optional[int] = None
    commission_year: Optional[int] = None
    year: Optional[int] = None
    consumer_balance_sense: Optional[str] = None
    decommissionable: bool = False
    discount_rate: float = Field(default=0.0, ge=0)
    economic_lifetime: float = Field(default=1.0, gt=0)
    efficiency: float = Field(default=1.0, gt=0)
    energy_to_power_ratio: float = Field(default=0.0, ge=0)
    fixed_cost: float = 0.0
    fixed_cost_storage_energy: float = 0.0
    group: Optional[str] = None
    initial_export_units: float = 0.0
    initial_import_units: float = 0.0
    initial_storage_level: Optional[float] = None
    initial_storage_units: float = 0.0
    initial_units: float = 0.0
    investment_cost: float = 0.0
    investment_cost_storage_energy: float = 0.0
    investment_integer: bool = False
    investment_integer_storage_energy: bool = False
    investment_limit: Optional[float] = None
    investment_limit_storage_energy: Optional[float] = None
    investment_method: str = "none"
    investable: bool = False
    is_milestone: bool = True
    is_seasonal: bool = False
    is_transport: bool = False
    max_energy_timeframe_partition: Optional[float] = None
    max_ramp_down: Optional[float] = None
    max_ramp_up: Optional[float] = None
    min_energy_timeframe_partition: Optional[float] = None
    min_operating_point: float = Field(default=0.0, ge=0, le=1)
    num_timesteps: int = Field(default=8760, gt=0)
    partition: int = Field(default=1, gt=0)
    peak_demand: float = Field(default=0.0, ge=0)
    period: int = Field(default=1, gt=0)
    rep_period: int = Field(default=1, gt=0)
    resolution: float = Field(default=1.0, gt=0)
    ramping: bool = False
    specification: str = "uniform"
    storage_inflows: float = 0.0
    storage_method_energy: bool = False
    technical_lifetime: float = Field(default=1.0, gt=0)
    unit_commitment: bool = False
    unit_commitment_integer: bool = False
    unit_commitment_method: Optional[str] = None
    units_on_cost: float = 0.0
    use_binary_storage_method: Optional[str] = None
    variable_cost: float = 0.0
    weight: float = Field(default=1.0, gt=0)
    bidding_zone: Optional[str] = None
    technology: Optional[str] = None
    lat: float = Field(default=0.0, ge=-90, le=90)
    lon: float = Field(default=0.0, ge=-180, le=180)
    length: int = Field(default=8760, gt=0)

    @field_validator("specification")
    @classmethod
    def validate_specification(cls, v: str) -> str:
        """Ensure the partition specification is one the model understands."""
        if v not in ("uniform", "explicit", "math"):
            raise ValueError(f"Unknown partition specification: {v}")
        return v

    @model_validator(mode="after")
    def fill_years(self) -> "InputDefaults":
        """Year columns default to default_year."""
        for name in ("milestone_year", "commission_year", "year"):
            if getattr(self, name) is None:
                setattr(self, name, self.default_year)
        return self

    def column_defaults(self) -> dict[str, Any]:
        """Defaults keyed by column name (default_year itself is not a column)."""
        return self.model_dump(exclude={"default_year"})


class BundleMetadata(BaseModel):
    """Metadata for reproducibility tracking."""

    created_at: datetime = Field(default_factory=datetime.utcnow)
    obz_results_version: str
    run_id: str
    tables: list[str] = Field(default_factory=list, description="Output tables written")
