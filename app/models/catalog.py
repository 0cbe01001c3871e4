from typing import Optional
import datetime
import decimal

from sqlalchemy import DateTime, Enum, ForeignKeyConstraint, Index, Integer, Numeric, PrimaryKeyConstraint, String, Text, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base


MOVEMENT_TYPES = (
    'PEDIDO_MAYORISTA',
    'VENTA_TIENDA_NUBE',
    'VENTA_MERCADO_LIBRE',
    'AJUSTE_MANUAL',
    'DEVOLUCION',
    'IMPORTACION_TN',
)


class Product(Base):
    __tablename__ = 'products'
    __table_args__ = (
        PrimaryKeyConstraint('id', name='products_pkey'),
        Index('idx_products_sku', 'sku'),
        Index('idx_products_name', 'name'),
        Index('idx_products_tienda_nube_id', 'tienda_nube_id'),
        {'comment': 'Catálogo mayorista. El SKU identifica al producto pero no es '
                    'UNIQUE a nivel esquema (el alta vía API valida duplicados).'}
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    sku: Mapped[str] = mapped_column(String(100), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[Optional[str]] = mapped_column(String(100))
    base_price: Mapped[Optional[decimal.Decimal]] = mapped_column(Numeric(12, 2), server_default=text('0'))
    description: Mapped[Optional[str]] = mapped_column(Text)
    tienda_nube_id: Mapped[Optional[str]] = mapped_column(String(100))
    mercado_libre_id: Mapped[Optional[str]] = mapped_column(String(100))
    created_at: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime, server_default=text('CURRENT_TIMESTAMP'))
    updated_at: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime, server_default=text('CURRENT_TIMESTAMP'))

    product_colors: Mapped[list['ProductColor']] = relationship('ProductColor', back_populates='product')


class Color(Base):
    __tablename__ = 'colors'
    __table_args__ = (
        PrimaryKeyConstraint('id', name='colors_pkey'),
        UniqueConstraint('code', name='colors_code_key'),
        Index('idx_colors_name', 'name'),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    code: Mapped[str] = mapped_column(String(100), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    hex: Mapped[Optional[str]] = mapped_column(String(20), server_default=text("'#000000'"))

    product_colors: Mapped[list['ProductColor']] = relationship('ProductColor', back_populates='color')


class Size(Base):
    __tablename__ = 'sizes'
    __table_args__ = (
        PrimaryKeyConstraint('id', name='sizes_pkey'),
        UniqueConstraint('size_code', name='sizes_size_code_key'),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    size_code: Mapped[str] = mapped_column(String(100), nullable=False)
    name: Mapped[Optional[str]] = mapped_column(String(100))

    variants: Mapped[list['ProductVariant']] = relationship('ProductVariant', back_populates='size')


class ProductColor(Base):
    __tablename__ = 'product_colors'
    __table_args__ = (
        ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='CASCADE', name='product_colors_product_id_fkey'),
        ForeignKeyConstraint(['color_id'], ['colors.id'], ondelete='CASCADE', name='product_colors_color_id_fkey'),
        PrimaryKeyConstraint('id', name='product_colors_pkey'),
        UniqueConstraint('product_id', 'color_id', name='unique_product_color'),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    product_id: Mapped[str] = mapped_column(String(36), nullable=False)
    color_id: Mapped[str] = mapped_column(String(36), nullable=False)

    product: Mapped['Product'] = relationship('Product', back_populates='product_colors')
    color: Mapped['Color'] = relationship('Color', back_populates='product_colors')
    variants: Mapped[list['ProductVariant']] = relationship('ProductVariant', back_populates='product_color')


class ProductVariant(Base):
    __tablename__ = 'product_variants'
    __table_args__ = (
        ForeignKeyConstraint(['product_color_id'], ['product_colors.id'], ondelete='CASCADE', name='product_variants_product_color_id_fkey'),
        ForeignKeyConstraint(['size_id'], ['sizes.id'], ondelete='RESTRICT', name='product_variants_size_id_fkey'),
        PrimaryKeyConstraint('id', name='product_variants_pkey'),
        UniqueConstraint('product_color_id', 'size_id', name='unique_variant_color_size'),
        Index('idx_variants_tienda_nube_id', 'tienda_nube_variant_id'),
        Index('idx_variants_sku', 'sku'),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    product_color_id: Mapped[str] = mapped_column(String(36), nullable=False)
    size_id: Mapped[str] = mapped_column(String(36), nullable=False)
    sku: Mapped[Optional[str]] = mapped_column(String(100))
    tienda_nube_variant_id: Mapped[Optional[str]] = mapped_column(String(100))
    mercado_libre_variant_id: Mapped[Optional[str]] = mapped_column(String(100))

    product_color: Mapped['ProductColor'] = relationship('ProductColor', back_populates='variants')
    size: Mapped['Size'] = relationship('Size', back_populates='variants')
    stock: Mapped[Optional['Stock']] = relationship('Stock', back_populates='variant', uselist=False)


class Stock(Base):
    __tablename__ = 'stocks'
    __table_args__ = (
        ForeignKeyConstraint(['variant_id'], ['product_variants.id'], ondelete='CASCADE', name='stocks_variant_id_fkey'),
        PrimaryKeyConstraint('variant_id', name='stocks_pkey'),
    )

    variant_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    stock: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text('0'))

    variant: Mapped['ProductVariant'] = relationship('ProductVariant', back_populates='stock')


class StockMovement(Base):
    __tablename__ = 'stock_movements'
    __table_args__ = (
        PrimaryKeyConstraint('id', name='stock_movements_pkey'),
        Index('idx_stock_movements_variant', 'variant_id'),
        Index('idx_stock_movements_type', 'movement_type'),
        Index('idx_stock_movements_created', 'created_at'),
        {'comment': 'Log append-only de cambios de stock. '
                    'quantity_change = new_stock - previous_stock. '
                    'variant_id sin FK: el log sobrevive al borrado del catálogo.'}
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    variant_id: Mapped[str] = mapped_column(String(36), nullable=False)
    previous_stock: Mapped[int] = mapped_column(Integer, nullable=False)
    new_stock: Mapped[int] = mapped_column(Integer, nullable=False)
    quantity_change: Mapped[int] = mapped_column(Integer, nullable=False)
    movement_type: Mapped[str] = mapped_column(Enum(*MOVEMENT_TYPES, name='movement_type'), nullable=False)
    reference: Mapped[Optional[str]] = mapped_column(String(255))
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime, nullable=False, default=datetime.datetime.now)
