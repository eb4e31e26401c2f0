from typing import Mapping

from haulage.core.enums import LoadSize

WEIGHT_FLOOR = 0.8
WEIGHT_SPAN = 0.4


def factor_for(load_size: LoadSize, table: Mapping[LoadSize, float]) -> float:
    return float(table[load_size])


def weight_fraction(load_weight: float, load_capacity: float) -> float:
    weight = max(load_weight or 0.0, 0.0)
    return min(weight / load_capacity, 1.0)


def weight_adjusted_factor(base_factor: float, load_weight: float, load_capacity: float) -> float:
    """Scale the load-size factor by how heavily the vehicle is loaded.

    The result stays within [0.8, 1.2] times the base factor. Weights above
    capacity count as a full load.
    """
    if load_capacity <= 0:
        return base_factor
    return base_factor * (WEIGHT_FLOOR + WEIGHT_SPAN * weight_fraction(load_weight, load_capacity))
