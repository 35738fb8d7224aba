"""Great-circle distance on a spherical Earth."""

import math

EARTH_RADIUS_METERS = 6_371_000.0


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Distance in meters between two WGS84 points (decimal degrees).

    Inputs are not validated; NaN propagates to the result.
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    # rounding can push a just past 1 for near-antipodal points
    if a > 1.0:
        a = 1.0
    elif a < 0.0:
        a = 0.0
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c
