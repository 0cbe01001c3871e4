"""
Schemas para clientes mayoristas y vendedores
"""

from pydantic import BaseModel, Field, EmailStr
from typing import Optional


class CustomerIn(BaseModel):
    """Crear/actualizar cliente"""
    name: str = Field(..., min_length=1, max_length=255)
    seller_id: Optional[str] = Field(None, alias="sellerId")
    business_name: Optional[str] = Field(None, max_length=255, alias="businessName")
    email: Optional[EmailStr] = None
    address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)

    class Config:
        populate_by_name = True


class CustomerOut(BaseModel):
    id: str
    name: str
    seller_id: Optional[str] = Field(None, alias="sellerId")
    business_name: Optional[str] = Field(None, alias="businessName")
    email: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None

    class Config:
        from_attributes = True
        populate_by_name = True


class SellerOut(BaseModel):
    id: str
    name: str
    email: str
    role: str
    commission_percentage: Optional[float] = Field(None, alias="commissionPercentage")

    class Config:
        from_attributes = True
        populate_by_name = True
