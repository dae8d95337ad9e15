from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, StrictInt

from ecofreight.domain.lifecycle import ShipmentStatus
from ecofreight.domain.models import TransportMode

class ShipmentCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    origin: str = Field(min_length=1, max_length=200)
    destination: str = Field(min_length=1, max_length=200)
    transport_type: TransportMode = TransportMode.TRUCK
    product_type: str = Field(min_length=1, max_length=100)
    quantity: int = Field(default=1, ge=1)
    weight: Optional[float] = Field(default=None, ge=0)
    distance_km: Optional[float] = Field(default=None, gt=0)
    planned_departure_date: datetime
    estimated_arrival_date: datetime
    customer_id: str = Field(min_length=1)
    assigned_driver_id: Optional[str] = None

class ShipmentRead(BaseModel):
    id: str
    tracking_id: str
    title: str
    description: Optional[str] = None
    origin: str
    destination: str
    transport_type: str
    product_type: str
    quantity: int
    weight: Optional[float] = None
    distance_km: float
    carbon_footprint: float
    status: str
    planned_departure_date: Optional[datetime] = None
    estimated_arrival_date: Optional[datetime] = None
    actual_arrival_date: Optional[datetime] = None
    customer_id: str
    assigned_driver_id: Optional[str] = None
    verification_ref: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class StatusChange(BaseModel):
    status: ShipmentStatus

class DeliveryUpdateCreate(BaseModel):
    # status stays a plain string so unknown values reach the recorder's own validation
    status: str
    location: str
    notes: Optional[str] = None
    temperature: Optional[float] = None
    humidity: Optional[float] = Field(default=None, ge=0, le=100)
    shock_detected: Optional[bool] = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    battery_level: Optional[float] = Field(default=None, ge=0, le=100)

class DeliveryUpdateRead(BaseModel):
    id: str
    shipment_id: str
    status: str
    location: str
    notes: Optional[str] = None
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    shock_detected: Optional[bool] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    battery_level: Optional[float] = None
    recorded_by: Optional[str] = None
    created_at: datetime
    verification_ref: Optional[str] = None

    class Config:
        from_attributes = True

class UpdateOutcome(str, Enum):
    RECORDED = "recorded"
    RECORDED_AND_TRANSITIONED = "recorded_and_transitioned"
    # the update row stands; the status side effect did not happen
    RECORDED_TRANSITION_REJECTED = "recorded_transition_rejected"
    RECORDED_TRANSITION_FAILED = "recorded_transition_failed"

class RecordUpdateResult(BaseModel):
    update: DeliveryUpdateRead
    outcome: UpdateOutcome
    shipment_status: str
    status_changed: bool
    status_error: Optional[str] = None

class ReviewCreate(BaseModel):
    # strict: true and 4.0 are not ratings; the range is checked by the review workflow
    rating: StrictInt
    comment: Optional[str] = Field(default=None, max_length=2000)

class ReviewRead(BaseModel):
    id: str
    shipment_id: str
    user_id: str
    rating: int
    comment: Optional[str] = None
    approved: bool
    verification_ref: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class ReviewSubmission(BaseModel):
    review: ReviewRead
    created: bool

class CarbonReport(BaseModel):
    shipment_count: int
    total_carbon_footprint: float
    estimated_carbon_saved: float
    by_transport_type: dict[str, float]
    sustainability_score: int
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

class SuggestionRead(BaseModel):
    id: str
    shipment_id: str
    user_id: Optional[str] = None
    title: str
    description: str
    carbon_savings: float
    cost_savings: Optional[float] = None
    implemented: bool
    created_at: datetime

    class Config:
        from_attributes = True
