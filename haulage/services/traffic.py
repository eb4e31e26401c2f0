from typing import Mapping, Optional

MIN_MULTIPLIER = 1.0
MAX_LIVE_MULTIPLIER = 2.5
# Free-flow speed of 30 km/h, i.e. two minutes per kilometre.
FREE_FLOW_MINUTES_PER_KM = 2.0


def multiplier_for_hour(hour: int, table: Mapping[int, float]) -> float:
    """Scheduled rush-hour multiplier; hours missing from the table are 1.0."""
    factor = table.get(hour, MIN_MULTIPLIER)
    return max(float(factor), MIN_MULTIPLIER)


def live_multiplier(actual_duration_minutes: Optional[float], distance_km: float) -> float:
    if actual_duration_minutes is None or distance_km <= 0:
        return MIN_MULTIPLIER

    optimal_duration = distance_km * FREE_FLOW_MINUTES_PER_KM
    ratio = actual_duration_minutes / optimal_duration
    return min(max(ratio, MIN_MULTIPLIER), MAX_LIVE_MULTIPLIER)


def effective_multiplier(scheduled: float, live: float) -> float:
    # Worse of the scheduled and live signals.
    return max(scheduled, live)
