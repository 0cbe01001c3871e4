"""
Router: USERS

Vendedores (para asignar clientes y pedidos)
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from app.core.database import get_db
from app.core.security import require_auth
from app.schemas.customer import SellerOut
from app.services.customer_service import CustomerService

router = APIRouter(prefix="/api/users", tags=["Users"], dependencies=[Depends(require_auth)])


@router.get("/sellers", response_model=List[SellerOut], summary="Listar vendedores")
def list_sellers(db: Session = Depends(get_db)):
    return CustomerService.list_sellers(db)
