from h5inspector.forecast.requester import request_forecast
from h5inspector.forecast.schemas import (
    ByCity,
    ByDataset,
    ByTemperature,
    ForecastRequest,
    ForecastResult,
    build_forecast_request,
)
from h5inspector.forecast.tools import estimate_temperature_range

__all__ = [
    "ByCity",
    "ByDataset",
    "ByTemperature",
    "ForecastRequest",
    "ForecastResult",
    "build_forecast_request",
    "estimate_temperature_range",
    "request_forecast",
]
