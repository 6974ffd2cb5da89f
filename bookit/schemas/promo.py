from pydantic import BaseModel
from typing import Optional

class PromoValidateIn(BaseModel):
    code: Optional[str] = None
    amount: Optional[int] = None

class PromoValidateOut(BaseModel):
    valid: bool
    code: str
    discountType: str
    discountValue: float
    discountAmount: int
