"""
Módulo de modelos ORM de LupoHub.

Módulos y sus modelos:
- catalog: Product, Color, Size, ProductColor, ProductVariant, Stock, StockMovement
- operations: User, Customer, Order, OrderItem
- integrations: Integration (credenciales OAuth por plataforma)

Importar `app.models` registra todas las tablas en Base.metadata.
"""

# ==============================================================================
# CATÁLOGO E INVENTARIO
# ==============================================================================

from app.models.catalog import (
    MOVEMENT_TYPES,
    Product,
    Color,
    Size,
    ProductColor,
    ProductVariant,
    Stock,
    StockMovement,
)

# ==============================================================================
# OPERACIONES
# ==============================================================================

from app.models.operations import (
    ORDER_STATUSES,
    USER_ROLES,
    User,
    Customer,
    Order,
    OrderItem,
)

# ==============================================================================
# INTEGRACIONES
# ==============================================================================

from app.models.integrations import (
    PLATFORMS,
    Integration,
)

__all__ = [
    "MOVEMENT_TYPES",
    "ORDER_STATUSES",
    "USER_ROLES",
    "PLATFORMS",
    "Product",
    "Color",
    "Size",
    "ProductColor",
    "ProductVariant",
    "Stock",
    "StockMovement",
    "User",
    "Customer",
    "Order",
    "OrderItem",
    "Integration",
]
