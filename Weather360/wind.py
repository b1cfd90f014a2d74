"""Wind direction helpers."""

COMPASS_POINTS = (
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
)
SECTOR_DEGREES = 360 / len(COMPASS_POINTS)  # 22.5


def wind_direction(degrees: int) -> str:
    """
    Map a meteorological wind bearing to a 16-point compass label.

    Any integer is accepted; values outside [0, 360) are wrapped first,
    so -10 and 350 land in the same sector.
    """
    normalized = ((degrees % 360) + 360) % 360
    index = int(round(normalized / SECTOR_DEGREES)) % len(COMPASS_POINTS)
    return COMPASS_POINTS[index]
