from pydantic import BaseModel


class CheckoutSessionResponse(BaseModel):
    url: str


class VerdictResponse(BaseModel):
    verdict: str


class ErrorResponse(BaseModel):
    error: str
