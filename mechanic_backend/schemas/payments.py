from pydantic import BaseModel, Field


class CreatePaymentIntentIn(BaseModel):
    serviceRequestId: str | None = None
    amount: float | None = Field(None, allow_inf_nan=False)


class ClientSecretOut(BaseModel):
    clientSecret: str | None


class CreatePaymentIntentOut(BaseModel):
    success: bool = True
    data: ClientSecretOut
