"""Catalog item: the live menu entry an approved image is published to."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, Field


class CatalogItem(BaseModel):
    model_config = {"frozen": True}

    id: str
    restaurant_id: str
    external_item_id: str
    category_id: str | None = None
    category_name: str | None = None
    name: Annotated[str, Field(min_length=1)]
    description: str | None = None
    price: Annotated[float, Field(ge=0)]
    image_url: str | None = None
    is_available: bool = True
    created_at: datetime
    updated_at: datetime
