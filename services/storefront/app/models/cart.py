from __future__ import annotations

from pydantic import BaseModel, Field


class AddLineRequest(BaseModel):
    sku: str = Field(..., min_length=1)
    qty: int = Field(1, ge=1)


class SetLineQuantityRequest(BaseModel):
    sku: str = Field(..., min_length=1)
    qty: int = Field(..., ge=0)
