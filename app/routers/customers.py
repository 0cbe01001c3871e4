"""
Router: CUSTOMERS

Clientes mayoristas (cada uno asignado opcionalmente a un vendedor)
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from app.core.database import get_db
from app.core.security import require_auth
from app.schemas.customer import CustomerIn, CustomerOut
from app.services.customer_service import CustomerService

router = APIRouter(prefix="/api/customers", tags=["Customers"], dependencies=[Depends(require_auth)])


@router.get("", response_model=List[CustomerOut], summary="Listar clientes")
def list_customers(
    seller_id: Optional[str] = Query(None, alias="sellerId"),
    db: Session = Depends(get_db),
):
    return CustomerService.list_customers(db, seller_id=seller_id)


@router.get("/{customer_id}", response_model=CustomerOut, summary="Obtener cliente")
def get_customer(customer_id: str, db: Session = Depends(get_db)):
    return CustomerService.get_customer(db, customer_id)


@router.post("", response_model=CustomerOut, status_code=status.HTTP_201_CREATED, summary="Crear cliente")
def create_customer(body: CustomerIn, db: Session = Depends(get_db)):
    return CustomerService.create_customer(db, body.model_dump())


@router.put("/{customer_id}", response_model=CustomerOut, summary="Actualizar cliente")
def update_customer(customer_id: str, body: CustomerIn, db: Session = Depends(get_db)):
    return CustomerService.update_customer(db, customer_id, body.model_dump())


@router.delete("/{customer_id}", summary="Eliminar cliente")
def delete_customer(customer_id: str, db: Session = Depends(get_db)):
    return CustomerService.delete_customer(db, customer_id)
