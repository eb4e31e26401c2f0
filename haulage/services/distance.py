"""Distance between Lagos locations from the static table or a zone estimate."""
from typing import Dict, Iterable, Mapping, Optional

from haulage.core.enums import LocationZone
from haulage.data.lgas import DISTANCE_MATRIX, LAGOS_LGAS

SAME_LOCATION_DISTANCE = 5.0
SAME_ZONE_DISTANCE = 15.0
CROSS_ZONE_DISTANCE = 25.0
OUTSKIRT_DISTANCE = 40.0


class DistanceResolver:
    """Resolves the road distance in kilometres between two locations.

    Lookup order: exact pair, reversed pair, same location, zone estimate.
    Unknown locations fall back to the flat cross-zone estimate so the
    resolver never fails.
    """

    def __init__(
        self,
        matrix: Optional[Mapping[str, Mapping[str, float]]] = None,
        zones: Optional[Mapping[str, LocationZone]] = None,
    ):
        self.matrix = matrix if matrix is not None else DISTANCE_MATRIX
        self.zones = zones if zones is not None else LAGOS_LGAS

    def _lookup(self, from_lga: str, to_lga: str) -> Optional[float]:
        distance = self.matrix.get(from_lga, {}).get(to_lga)
        if distance:
            return float(distance)
        return None

    def resolve(self, from_lga: str, to_lga: str) -> float:
        direct = self._lookup(from_lga, to_lga)
        if direct is not None:
            return direct

        reverse = self._lookup(to_lga, from_lga)
        if reverse is not None:
            return reverse

        return self.estimate(from_lga, to_lga)

    def estimate(self, from_lga: str, to_lga: str) -> float:
        if from_lga == to_lga:
            return SAME_LOCATION_DISTANCE

        from_zone = self.zones.get(from_lga)
        to_zone = self.zones.get(to_lga)
        if from_zone is None or to_zone is None:
            return CROSS_ZONE_DISTANCE

        if LocationZone.OUTSKIRT in (from_zone, to_zone):
            return OUTSKIRT_DISTANCE
        if from_zone == to_zone:
            return SAME_ZONE_DISTANCE
        return CROSS_ZONE_DISTANCE

    def total_distance(self, locations: Iterable[str]) -> float:
        """Sum of consecutive pair distances, in the order given."""
        locations = list(locations)
        if len(locations) < 2:
            return 0.0

        total = 0.0
        for from_lga, to_lga in zip(locations, locations[1:]):
            total += self.resolve(from_lga, to_lga)
        return total


def zone_of(lga: str) -> Optional[LocationZone]:
    return LAGOS_LGAS.get(lga)


def list_lgas() -> Dict[str, LocationZone]:
    return dict(LAGOS_LGAS)
