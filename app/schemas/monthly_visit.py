# app/schemas/monthly_visit.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional, List


class MonthlyVisitOut(BaseModel):
    id: int
    supplier_id: int
    month: str
    year: int
    visit_count: int
    last_visit_at: Optional[datetime]

    class Config:
        from_attributes = True


class MonthlyStatsOut(BaseModel):
    month: str
    supplier_stats: List[MonthlyVisitOut]
