from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

from storefront.schemas.common import MAX_INT_ID


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    image: str = Field(..., min_length=1, max_length=500)
    category: str = Field(..., min_length=1, max_length=100)
    new_price: float = Field(..., ge=0)
    old_price: float = Field(..., ge=0)


class ProductRemove(BaseModel):
    id: int = Field(..., ge=0, le=MAX_INT_ID)
    name: Optional[str] = None


class ProductResponse(BaseModel):
    id: int
    name: str
    image: str
    category: str
    new_price: float
    old_price: float
    date: datetime
    available: bool

    model_config = ConfigDict(from_attributes=True)


class ProductActionResponse(BaseModel):
    success: bool
    name: Optional[str] = None
