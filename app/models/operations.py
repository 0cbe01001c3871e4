from typing import Optional
import datetime
import decimal

from sqlalchemy import Date, DateTime, Enum, ForeignKeyConstraint, Index, Integer, Numeric, PrimaryKeyConstraint, String, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base


ORDER_STATUSES = ('Borrador', 'Confirmado', 'Preparación', 'Despachado', 'Cancelado')
USER_ROLES = ('ADMIN', 'SELLER', 'WAREHOUSE')


class User(Base):
    __tablename__ = 'users'
    __table_args__ = (
        PrimaryKeyConstraint('id', name='users_pkey'),
        UniqueConstraint('email', name='users_email_key'),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(Enum(*USER_ROLES, name='user_role'), nullable=False, server_default=text("'SELLER'"))
    commission_percentage: Mapped[Optional[decimal.Decimal]] = mapped_column(Numeric(5, 2))
    password_hash: Mapped[Optional[str]] = mapped_column(String(255))


class Customer(Base):
    __tablename__ = 'customers'
    __table_args__ = (
        PrimaryKeyConstraint('id', name='customers_pkey'),
        Index('idx_customers_seller', 'seller_id'),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    seller_id: Mapped[Optional[str]] = mapped_column(String(36))
    business_name: Mapped[Optional[str]] = mapped_column(String(255))
    email: Mapped[Optional[str]] = mapped_column(String(255))
    address: Mapped[Optional[str]] = mapped_column(String(255))
    city: Mapped[Optional[str]] = mapped_column(String(100))


class Order(Base):
    __tablename__ = 'orders'
    __table_args__ = (
        PrimaryKeyConstraint('id', name='orders_pkey'),
        Index('idx_orders_customer', 'customer_id'),
        Index('idx_orders_date', 'date'),
        Index('idx_orders_status', 'status'),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    customer_id: Mapped[str] = mapped_column(String(36), nullable=False)
    seller_id: Mapped[Optional[str]] = mapped_column(String(36))
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(Enum(*ORDER_STATUSES, name='order_status'), nullable=False, server_default=text("'Borrador'"))
    total: Mapped[decimal.Decimal] = mapped_column(Numeric(12, 2), nullable=False, server_default=text('0'))
    picked_by: Mapped[Optional[str]] = mapped_column(String(255))
    created_at: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime, server_default=text('CURRENT_TIMESTAMP'))

    items: Mapped[list['OrderItem']] = relationship(
        'OrderItem', back_populates='order', cascade='all, delete-orphan', order_by='OrderItem.position'
    )


class OrderItem(Base):
    """
    Línea de pedido

    variant_id no tiene FK: los pedidos históricos sobreviven a la poda del
    catálogo.
    """
    __tablename__ = 'order_items'
    __table_args__ = (
        ForeignKeyConstraint(['order_id'], ['orders.id'], ondelete='CASCADE', name='order_items_order_id_fkey'),
        PrimaryKeyConstraint('id', name='order_items_pkey'),
        Index('idx_order_items_order', 'order_id'),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    order_id: Mapped[str] = mapped_column(String(36), nullable=False)
    variant_id: Mapped[str] = mapped_column(String(36), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    picked: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text('0'))
    price_at_moment: Mapped[decimal.Decimal] = mapped_column(Numeric(12, 2), nullable=False, server_default=text('0'))
    position: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text('0'))

    order: Mapped['Order'] = relationship('Order', back_populates='items')
