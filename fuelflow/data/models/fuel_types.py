from __future__ import annotations

from pydantic import BaseModel, Field


class FuelType(BaseModel):
    """Catalog entry from the fuel_types table."""
    id: int = Field(description="Unique fuel type identifier")
    code: str = Field(description="Short code, e.g. PET or DSL")
    name: str = Field(description="Display name")
    price: float = Field(gt=0, description="Price per liter in rupees")
    is_active: bool = Field(default=True, description="Only active fuels are offered for sale")
