from pydantic import BaseModel, Field, AliasChoices

from storefront.schemas.common import MAX_INT_ID


class CartItemRequest(BaseModel):
    # Support camelCase (web client) and snake_case
    item_id: int = Field(..., ge=0, le=MAX_INT_ID, validation_alias=AliasChoices("itemId", "item_id"))


class CartItemState(BaseModel):
    itemId: int
    quantity: int
