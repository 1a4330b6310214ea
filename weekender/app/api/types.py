from __future__ import annotations

from typing import Annotated

from fastapi import Path, Query

PlaceId = Annotated[int, Path(ge=1, description="Place identifier")]
PlanId = Annotated[int, Path(ge=1, description="Plan identifier")]

SearchQuery = Annotated[
    str | None,
    Query(description="Case-insensitive text matched against name and overview"),
]

MonthQuery = Annotated[
    int | None,
    Query(ge=1, le=12, description="Month number (1-12); defaults to the current month"),
]

WeatherCode = Annotated[int, Query(ge=0, le=99, description="WMO weather code")]
TemperatureF = Annotated[float, Query(ge=-80, le=150, description="Temperature in °F")]
PrecipitationChance = Annotated[
    float,
    Query(ge=0, le=100, description="Precipitation probability in percent"),
]

PhotoRef = Annotated[
    str,
    Query(min_length=3, max_length=512, description="Provider photo token (places/.../photos/...)"),
]
