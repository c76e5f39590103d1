from __future__ import annotations

from fastapi import FastAPI, Query
from pydantic import BaseModel, ConfigDict

from modules.unitconvert.core.expression import convert_units
from modules.unitconvert.core.units import list_units, si_units
from universe.errors import ValidationNormalizeMiddleware

app = FastAPI(title="SI Unit Converter")
app.add_middleware(ValidationNormalizeMiddleware, message="Missing units parameter.")


class ConversionResponse(BaseModel):
    # Overflowed or 0/0 factors go out as "Infinity", "-Infinity" or "NaN".
    model_config = ConfigDict(ser_json_inf_nan="strings")

    unit_name: str
    multiplication_factor: float


@app.get("/")
def index():
    return {"units": list_units(), "si_units": si_units()}


@app.get("/si", response_model=ConversionResponse)
def convert_to_si(units: str = Query(...)):
    result = convert_units(units)
    return ConversionResponse(
        unit_name=result.unit_name,
        multiplication_factor=result.factor,
    )
