"""
Excepciones personalizadas del sistema

Principio: Fail Fast - Lanzar excepciones claras y específicas
Cada excepción lleva su status HTTP; el handler de app/main.py la serializa
como {"error", "message", "details"}.
"""


class BaseAppException(Exception):
    """Base para todas las excepciones de la app"""

    status_code = 400

    def __init__(self, message: str, details: dict = None, status_code: int = None):
        self.message = message
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationException(BaseAppException):
    """Datos de entrada inválidos"""
    status_code = 400


class AuthenticationException(BaseAppException):
    """Credenciales o token inválidos"""
    status_code = 401


class NotFoundException(BaseAppException):
    """Recurso no encontrado"""
    status_code = 404


class ConflictException(BaseAppException):
    """Conflicto con el estado actual"""
    status_code = 409


# ==================== CATÁLOGO ====================

class ProductNotFoundException(NotFoundException):
    """Producto no encontrado"""

    def __init__(self, reference: str = None):
        super().__init__(
            message="Producto no encontrado",
            details={"product": reference} if reference else None
        )


class VariantNotFoundException(NotFoundException):
    """Variante no encontrada"""

    def __init__(self, variant_id: str = None):
        super().__init__(
            message="Variante no encontrada",
            details={"variant_id": variant_id} if variant_id else None
        )


class DuplicateSkuException(ConflictException):
    """SKU ya registrado"""

    def __init__(self, sku: str):
        super().__init__(message="El SKU ya existe", details={"sku": sku})


class DuplicateVariantException(ConflictException):
    """Combinación color/talle ya existe para el producto"""

    def __init__(self, product_id: str, color: str, size: str):
        super().__init__(
            message="La variante ya existe",
            details={"product_id": product_id, "color": color, "size": size}
        )


class StockMovementImmutableException(ConflictException):
    """Los movimientos de stock son append-only"""

    def __init__(self, movement_id: str):
        super().__init__(
            message="Los movimientos de stock no se pueden modificar",
            details={"movement_id": movement_id}
        )


# ==================== OPERATIONS ====================

class OrderNotFoundException(NotFoundException):
    """Pedido no encontrado"""

    def __init__(self, order_id: str):
        super().__init__(
            message="Pedido no encontrado",
            details={"order_id": order_id}
        )


class CustomerNotFoundException(NotFoundException):
    """Cliente no encontrado"""

    def __init__(self, customer_id: str):
        super().__init__(
            message="Cliente no encontrado",
            details={"customer_id": customer_id}
        )


# ==================== INTEGRACIONES ====================

class IntegrationNotConnectedException(BaseAppException):
    """No hay credenciales para la plataforma"""
    status_code = 400


class IntegrationNotConfiguredException(BaseAppException):
    """Falta configuración de la app (App ID / secret)"""
    status_code = 500


class SyncInProgressException(ConflictException):
    """Ya hay una importación corriendo"""

    def __init__(self, platform: str):
        super().__init__(
            message="Ya hay una sincronización en curso",
            details={"platform": platform}
        )


class ExternalServiceException(BaseAppException):
    """Error de una API externa (Tienda Nube / Mercado Libre)"""
    status_code = 502
