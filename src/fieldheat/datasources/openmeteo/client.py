"""Open-Meteo archive API constants.

API docs: https://open-meteo.com/en/docs/historical-weather-api
"""

ARCHIVE_API = "https://archive-api.open-meteo.com/v1/archive"

# Full agronomic daily variable set (ERA5-Land)
DAILY_VARS = [
    "temperature_2m_max",
    "temperature_2m_min",
    "temperature_2m_mean",
    "precipitation_sum",
    "rain_sum",
    "snowfall_sum",
    "precipitation_hours",
    "sunshine_duration",
    "et0_fao_evapotranspiration",
    "wind_speed_10m_max",
    "wind_gusts_10m_max",
    "wind_direction_10m_dominant",
    "shortwave_radiation_sum",
    "relative_humidity_2m_mean",
    "dew_point_2m_mean",
    "soil_temperature_0_to_7cm_mean",
    "soil_moisture_0_to_7cm_mean",
]

# Open-Meteo variable -> DailyWeatherRecord field
FIELD_MAP = {
    "temperature_2m_max": "tmax",
    "temperature_2m_min": "tmin",
    "temperature_2m_mean": "tmean",
    "precipitation_sum": "precipitation",
    "relative_humidity_2m_mean": "humidity",
    "shortwave_radiation_sum": "solar_radiation",
    "et0_fao_evapotranspiration": "evapotranspiration",
    "wind_speed_10m_max": "wind_speed_max",
    "dew_point_2m_mean": "dew_point",
    "soil_temperature_0_to_7cm_mean": "soil_temperature",
    "soil_moisture_0_to_7cm_mean": "soil_moisture",
}

DEFAULT_TIMEOUT = 60  # seconds, archive requests for long ranges are slow
