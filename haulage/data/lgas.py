"""Lagos Local Government Areas, their zones and known road distances."""
from typing import Dict, Tuple

from haulage.core.enums import LocationZone

LAGOS_LGAS: Dict[str, LocationZone] = {
    # Mainland
    "Agege": LocationZone.MAINLAND,
    "Ajeromi-Ifelodun": LocationZone.MAINLAND,
    "Alimosho": LocationZone.MAINLAND,
    "Amuwo-Odofin": LocationZone.MAINLAND,
    "Apapa": LocationZone.MAINLAND,
    "Ifako-Ijaiye": LocationZone.MAINLAND,
    "Ikeja": LocationZone.MAINLAND,
    "Kosofe": LocationZone.MAINLAND,
    "Mushin": LocationZone.MAINLAND,
    "Oshodi-Isolo": LocationZone.MAINLAND,
    "Shomolu": LocationZone.MAINLAND,
    "Surulere": LocationZone.MAINLAND,
    # Island
    "Eti-Osa": LocationZone.ISLAND,
    "Lagos Island": LocationZone.ISLAND,
    "Lagos Mainland": LocationZone.ISLAND,
    # Outskirt
    "Badagry": LocationZone.OUTSKIRT,
    "Epe": LocationZone.OUTSKIRT,
    "Ibeju-Lekki": LocationZone.OUTSKIRT,
    "Ikorodu": LocationZone.OUTSKIRT,
}

# Kilometres between major locations. Only one direction needs to be listed.
DISTANCE_MATRIX: Dict[str, Dict[str, float]] = {
    "Ikeja": {
        "Victoria Island": 22,
        "Lekki": 28,
        "Surulere": 18,
        "Apapa": 15,
        "Ikorodu": 35,
        "Badagry": 45,
    },
    "Victoria Island": {
        "Ikeja": 22,
        "Lekki": 12,
        "Surulere": 25,
        "Apapa": 18,
        "Ikorodu": 40,
    },
    "Lekki": {
        "Ikeja": 28,
        "Victoria Island": 12,
        "Surulere": 30,
        "Ikorodu": 25,
    },
    "Surulere": {
        "Ikeja": 18,
        "Victoria Island": 25,
        "Lekki": 30,
        "Apapa": 12,
    },
    "Apapa": {
        "Ikeja": 15,
        "Victoria Island": 18,
        "Surulere": 12,
        "Ikorodu": 45,
    },
    "Ikorodu": {
        "Ikeja": 35,
        "Victoria Island": 40,
        "Lekki": 25,
        "Apapa": 45,
    },
}

# Approximate centroids (lat, lng), used when an address cannot be geocoded.
LGA_COORDINATES: Dict[str, Tuple[float, float]] = {
    "Apapa": (6.4474, 3.3619),
    "Ibeju-Lekki": (6.4281, 3.6588),
    "Ikeja": (6.5954, 3.3364),
    "Victoria Island": (6.4281, 3.4219),
    "Lekki": (6.4474, 3.4783),
    "Surulere": (6.4969, 3.3481),
    "Ikorodu": (6.6194, 3.5106),
    "Badagry": (6.4319, 2.8876),
    "Agege": (6.6152, 3.3244),
    "Alimosho": (6.5833, 3.2500),
    "Amuwo-Odofin": (6.4667, 3.3167),
    "Eti-Osa": (6.4281, 3.6588),
    "Lagos Island": (6.4541, 3.3947),
    "Lagos Mainland": (6.5027, 3.3778),
    "Mushin": (6.5244, 3.3439),
    "Oshodi-Isolo": (6.5244, 3.3278),
    "Shomolu": (6.5392, 3.3844),
    "Epe": (6.5833, 3.9833),
    "Ifako-Ijaiye": (6.6667, 3.2667),
    "Kosofe": (6.4667, 3.3833),
    "Ajeromi-Ifelodun": (6.4667, 3.3167),
}
