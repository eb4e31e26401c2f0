from enum import Enum


class LocationZone(str, Enum):
    MAINLAND = "mainland"
    ISLAND = "island"
    OUTSKIRT = "outskirt"

    def __str__(self):
        return self.value


class StopRole(str, Enum):
    PICKUP = "pickup"
    DROPOFF = "dropoff"

    def __str__(self):
        return self.value


class LoadSize(str, Enum):
    HALF = "half"
    SEMI_FULL = "semi-full"
    FULL = "full"

    def __str__(self):
        return self.value


class FuelType(str, Enum):
    PETROL = "petrol"
    DIESEL = "diesel"

    def __str__(self):
        return self.value


class QuoteStatus(str, Enum):
    DRAFT = "draft"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"

    def __str__(self):
        return self.value


class CycleOutcome(str, Enum):
    PRICED = "priced"
    NO_ROUTE = "no_route"
    SUPERSEDED = "superseded"

    def __str__(self):
        return self.value
