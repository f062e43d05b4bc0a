from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

class CheckoutItem(BaseModel):
    product_id: Optional[str] = None
    price_id: Optional[str] = None
    quantity: int = Field(default=1, ge=1, le=10)

    @model_validator(mode="after")
    def exactly_one_reference(self):
        if bool(self.product_id) == bool(self.price_id):
            raise ValueError("Each item needs exactly one of product_id or price_id")
        return self

class CheckoutRequest(BaseModel):
    items: List[CheckoutItem] = Field(min_length=1)
    email: Optional[str] = None
    customer_id: Optional[str] = None
    job_id: Optional[str] = Field(default=None, max_length=200)
    success_url: Optional[str] = None
    cancel_url: Optional[str] = None
    redirect: bool = False

class CheckoutSessionResponse(BaseModel):
    id: str
    url: Optional[str]
