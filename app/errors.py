"""Exception types raised by the ride planner core."""


class RidePlannerError(Exception):
    """Base class for ride planner failures."""


class WeatherFetchError(RidePlannerError):
    """A forecast could not be obtained for a city after all retries."""

    def __init__(self, city: str, message: str):
        super().__init__(f"{city}: {message}")
        self.city = city


class ForecastWindowError(RidePlannerError):
    """An hourly slice reaches past the end of the forecast payload."""
