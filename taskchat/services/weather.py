"""
Weather Service - 天气服务客户端
按配置的地理坐标查询当前天气，API Key 由意图分类服务在 Weather 结果中返回。
"""

from typing import Optional

import aiohttp

from ..core.exceptions import WeatherException

OPENWEATHER_URL = "https://api.openweathermap.org/data/2.5/weather"


class WeatherClient:
    """OpenWeatherMap 当前天气查询"""

    def __init__(self, latitude: float, longitude: float, units: str = "metric",
                 base_url: str = OPENWEATHER_URL, timeout: float = 10):
        self.latitude = latitude
        self.longitude = longitude
        self.units = units
        self.base_url = base_url
        self.timeout = timeout
        self.session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout))
        return self.session

    async def current_weather(self, api_key: str) -> str:
        """
        查询当前位置的天气并返回一句描述。

        :param api_key: 天气服务的 API Key。
        :raises WeatherException: 缺少 API Key、网络错误或响应异常时抛出。
        """
        if not api_key:
            raise WeatherException("No weather API key was provided")

        session = await self._get_session()
        params = {
            "lat": str(self.latitude),
            "lon": str(self.longitude),
            "units": self.units,
            "appid": api_key,
        }
        try:
            async with session.get(self.base_url, params=params) as response:
                if response.status >= 400:
                    text = await response.text()
                    raise WeatherException(f"Weather request failed: {response.status} - {text}")
                data = await response.json()
        except aiohttp.ClientError as e:
            raise WeatherException(f"Network error: {str(e)}")
        except ValueError as e:
            raise WeatherException(f"Malformed weather response: {str(e)}")

        try:
            description = data["weather"][0]["description"]
            temperature = data["main"]["temp"]
        except (KeyError, IndexError, TypeError):
            raise WeatherException(f"Unexpected weather response: {data!r}")

        unit = {"metric": "°C", "imperial": "°F"}.get(self.units, "K")
        place = data.get("name")
        where = f" in {place}" if place else ""
        return f"It is currently {description}{where} with a temperature of {round(temperature)}{unit}."

    async def close(self):
        if self.session and not self.session.closed:
            await self.session.close()
