"""
CustomerService - Clientes mayoristas y vendedores
"""

from typing import Any, Dict, List, Optional
import logging

from sqlalchemy.orm import Session

from app.core.exceptions import CustomerNotFoundException
from app.models import Customer, User
from app.services.id_generator import IDGenerator

logger = logging.getLogger(__name__)

CUSTOMER_FIELDS = ("name", "seller_id", "business_name", "email", "address", "city")


class CustomerService:

    @staticmethod
    def list_customers(db: Session, seller_id: Optional[str] = None) -> List[Customer]:
        q = db.query(Customer)
        if seller_id:
            q = q.filter(Customer.seller_id == seller_id)
        return q.order_by(Customer.name).all()

    @staticmethod
    def get_customer(db: Session, customer_id: str) -> Customer:
        customer = db.get(Customer, customer_id)
        if not customer:
            raise CustomerNotFoundException(customer_id)
        return customer

    @staticmethod
    def create_customer(db: Session, data: Dict[str, Any]) -> Customer:
        customer = Customer(
            id=IDGenerator.generate_customer_id(),
            **{f: data.get(f) for f in CUSTOMER_FIELDS},
        )
        db.add(customer)
        db.commit()
        db.refresh(customer)
        logger.info(f"✅ Cliente creado: {customer.name} ({customer.id})")
        return customer

    @staticmethod
    def update_customer(db: Session, customer_id: str, data: Dict[str, Any]) -> Customer:
        customer = CustomerService.get_customer(db, customer_id)
        for field in CUSTOMER_FIELDS:
            setattr(customer, field, data.get(field))
        db.commit()
        db.refresh(customer)
        return customer

    @staticmethod
    def delete_customer(db: Session, customer_id: str) -> Dict[str, Any]:
        customer = CustomerService.get_customer(db, customer_id)
        db.delete(customer)
        db.commit()
        return {"id": customer_id}

    @staticmethod
    def list_sellers(db: Session) -> List[User]:
        return db.query(User).filter(User.role == "SELLER").order_by(User.name).all()
