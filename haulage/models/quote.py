from sqlalchemy import Column, String, Float, Integer, DateTime, Enum, JSON
from haulage.models.base import BaseModel
from haulage.core.enums import LoadSize, QuoteStatus


class Quote(BaseModel):
    __tablename__ = "quotes"

    id = Column(String(64), primary_key=True)
    stops = Column(JSON, nullable=False)
    load_size = Column(Enum(LoadSize, values_callable=lambda e: [m.value for m in e]), nullable=False)
    load_weight = Column(Float, nullable=False, default=0.0)
    pickup_time = Column(DateTime(timezone=True), nullable=False)
    distance = Column(Float, nullable=False)
    duration = Column(Float, nullable=True)
    price = Column(Integer, nullable=False)
    breakdown = Column(JSON, nullable=False)
    status = Column(Enum(QuoteStatus, values_callable=lambda e: [m.value for m in e]), default=QuoteStatus.DRAFT, nullable=False)
    vehicle_specs = Column(JSON, nullable=True)
    fuel_data = Column(JSON, nullable=True)
    # Lower-cased stop locations and addresses for substring search.
    search_text = Column(String, nullable=False, default="")
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}
