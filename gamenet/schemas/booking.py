from pydantic import BaseModel, Field
from typing import Optional

class SessionCreate(BaseModel):
    stationId: str
    date: str  # local calendar, YYYY-MM-DD or YYYY/MM/DD
    startTime: str  # HH:MM
    endTime: str  # HH:MM
    playersCount: int = Field(default=1, ge=1)

class ReservationCreate(BaseModel):
    organizationId: str
    stationId: str
    consoleId: str
    reservedDate: str
    startTime: str
    endTime: str
    playerCount: int = Field(default=1, ge=1)
    userId: Optional[str] = None  # empty: the venue blocks the slot itself
    price: Optional[int] = None  # overrides the pricing tier
    notes: Optional[str] = None

class AvailabilityCheck(BaseModel):
    stationId: str
    reservedDate: str
    startTime: str
    endTime: str

class SessionInfo(BaseModel):
    id: str
    organizationId: str
    organizationName: Optional[str] = None
    stationId: str
    stationTitle: Optional[str] = None
    date: str
    startTime: str
    endTime: str
    duration: int
    playersCount: int
    status: str
    invoiceId: Optional[str] = None

class SessionCreatedOut(BaseModel):
    sessionId: str
    invoiceId: str
    totalPrice: int
    tax: int
    priceBeforeTax: int
    expireAt: str
    session: SessionInfo

class SessionPreviewOut(BaseModel):
    stationId: str
    stationTitle: str
    date: str
    startTime: str
    endTime: str
    duration: int
    playersCount: int
    priceBeforeTax: int
    tax: int
    totalPrice: int
    isAvailable: bool
