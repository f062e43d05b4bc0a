from typing import Optional

from pydantic import BaseModel, Field, model_validator

class CreditRequest(BaseModel):
    email: Optional[str] = None
    customer_id: Optional[str] = None

    @model_validator(mode="after")
    def customer_reference(self):
        if not self.email and not self.customer_id:
            raise ValueError("Provide email or customer_id")
        return self

class BundleCheckoutRequest(CreditRequest):
    job_id: Optional[str] = Field(default=None, max_length=200)
    success_url: Optional[str] = None
    cancel_url: Optional[str] = None
    redirect: bool = False

class CreditQuote(BaseModel):
    customer_id: Optional[str]
    currency: str
    qualifying_total: int
    credit: int
    max_credit: int
    capped: bool
    sessions_considered: int

class BundleCheckoutResponse(BaseModel):
    id: str
    url: Optional[str]
    credit: CreditQuote
    promotion_code: Optional[str] = None
