from pydantic import BaseModel
from typing import List, Optional

class WorkingHoursIn(BaseModel):
    dayOfWeek: int  # 0=Saturday .. 6=Friday
    isClosed: bool = False
    is24Hours: bool = False
    startTime: Optional[str] = None
    endTime: Optional[str] = None

class WorkingHoursUpdate(BaseModel):
    workingHours: List[WorkingHoursIn]

class TaxSettingsUpdate(BaseModel):
    taxEnabled: Optional[bool] = None
    taxRate: Optional[float] = None
