from typing import Dict, Optional, Union

from pydantic import BaseModel

class PriceInfo(BaseModel):
    unit_amount: Optional[int]
    currency: str
    price_id: str

class PriceError(BaseModel):
    error: str

PriceMap = Dict[str, Union[PriceInfo, PriceError]]
