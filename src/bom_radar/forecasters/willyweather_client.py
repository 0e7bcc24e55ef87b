# forecasters/willyweather_client.py
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential
from ..exceptions import ForecastError

PERTH_ID = "14576"

KNOWN_LOCATIONS = {
    "Perth": PERTH_ID,
    "Australind": "15864",
}

@dataclass
class ForecastDay:
    """Summary of one forecast day"""
    date_time: str
    code: str
    description: str
    min: int
    max: int
    uv: Optional[float] = None

class WillyWeatherClient:
    """Thin client for the WillyWeather forecast API"""

    FORECAST_API_TEMPLATE = "https://api.willyweather.com.au/v2/{api_key}/locations/{location_id}/weather.json"

    def __init__(self, api_key: str, session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.session = session or requests.Session()
        self.logger = logging.getLogger(__name__)

    @retry(retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
           stop=stop_after_attempt(3),
           wait=wait_exponential(multiplier=1, min=2, max=8),
           reraise=True)
    def _get(self, url: str, params: Dict[str, Any]) -> requests.Response:
        return self.session.get(url, params=params, timeout=30)

    def fetch_raw(self, location_id: str, days: int) -> Dict[str, Any]:
        """Fetch the raw weather and uv forecast JSON"""
        url = self.FORECAST_API_TEMPLATE.format(api_key=self.api_key, location_id=location_id)
        params = {'forecasts': 'weather,uv', 'days': str(days)}

        try:
            response = self._get(url, params)
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as e:
            self.logger.error(f"Error fetching forecast for {location_id}: {e}")
            raise ForecastError(f"Failed to fetch forecast for {location_id}: {e}") from e

    def get_forecast(self, location_id: str, days: int = 7) -> List[ForecastDay]:
        return parse_forecast(self.fetch_raw(location_id, days))

def parse_forecast(payload: Dict[str, Any]) -> List[ForecastDay]:
    """Reduce the API response to one entry per day"""
    forecasts = payload.get("forecasts", {})
    weather_days = forecasts.get("weather", {}).get("days", [])

    uv_by_date = {}
    for uv_day in (forecasts.get("uv") or {}).get("days", []):
        alert = uv_day.get("alert") or {}
        uv_by_date[uv_day.get("dateTime", "")[:10]] = alert.get("maxIndex")

    days = []
    for day in weather_days:
        entries = day.get("entries") or []
        if not entries:
            continue
        entry = entries[0]
        date_time = day.get("dateTime", "")
        days.append(ForecastDay(
            date_time=date_time,
            code=entry.get("precisCode", ""),
            description=entry.get("precis", ""),
            min=int(entry.get("min", 0)),
            max=int(entry.get("max", 0)),
            uv=uv_by_date.get(date_time[:10]),
        ))
    return days
