"""Service catalog schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel


class CategoryCreate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None


class CategoryUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None


class CategoryResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    sort_order: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ServiceCreate(BaseModel):
    category_id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    is_active: bool = True
    # Staff type prices like "1250,50"
    base_price: Optional[Union[str, float]] = None


class ServiceUpdate(BaseModel):
    category_id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None
    base_price: Optional[Union[str, float]] = None


class ServiceResponse(BaseModel):
    id: str
    category_id: str
    name: str
    description: Optional[str] = None
    is_active: bool
    base_price: Optional[float] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
