from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from packages.shared.schemas.store_v1 import GuestContact


class CheckoutRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    guest_contact: GuestContact = Field(alias="guestContact")


class CheckoutResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    order_id: str = Field(alias="orderId")
    redirect_to: str | None = Field(None, alias="redirectTo")
