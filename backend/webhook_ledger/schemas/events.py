"""Pydantic schemas for stored events and the ingestion endpoint"""
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional


class WebhookEventOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    external_event_id: str
    event_type: str
    payload: Dict[str, Any]
    received_at: datetime
    processed_at: Optional[datetime] = None


class EventListResponse(BaseModel):
    events: List[WebhookEventOut]
    count: int
    limit: int
    offset: int


class WebhookAck(BaseModel):
    received: bool = True
    eventId: str
    eventType: str


class ErrorDetail(BaseModel):
    code: str
    message: str


class ErrorResponse(BaseModel):
    error: ErrorDetail


class CheckoutRequest(BaseModel):
    # Optional so a missing amount gets the endpoint's own 400 message
    amount: Optional[int] = None  # smallest currency unit
    currency: str = "usd"
    productName: str = "Custom Payment"
    metadata: Dict[str, str] = Field(default_factory=dict)


class CheckoutResponse(BaseModel):
    id: str
    url: Optional[str] = None
