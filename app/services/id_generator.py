"""
Service: Generación de IDs únicos

Principio: DRY - Un solo lugar para generar IDs
Todas las entidades usan UUID4 en texto (36 caracteres), igual que los
datos heredados del sistema anterior.
"""

import uuid


class IDGenerator:
    """
    Generador de IDs

    Cada entidad tiene su propio método para poder cambiar el formato
    de una sola tabla sin tocar los services.
    """

    @staticmethod
    def _generate_id() -> str:
        return str(uuid.uuid4())

    # ==================== CATÁLOGO ====================

    @staticmethod
    def generate_product_id() -> str:
        return IDGenerator._generate_id()

    @staticmethod
    def generate_color_id() -> str:
        return IDGenerator._generate_id()

    @staticmethod
    def generate_size_id() -> str:
        return IDGenerator._generate_id()

    @staticmethod
    def generate_product_color_id() -> str:
        return IDGenerator._generate_id()

    @staticmethod
    def generate_variant_id() -> str:
        return IDGenerator._generate_id()

    @staticmethod
    def generate_movement_id() -> str:
        return IDGenerator._generate_id()

    # ==================== OPERATIONS ====================

    @staticmethod
    def generate_order_id() -> str:
        return IDGenerator._generate_id()

    @staticmethod
    def generate_order_item_id() -> str:
        return IDGenerator._generate_id()

    @staticmethod
    def generate_customer_id() -> str:
        return IDGenerator._generate_id()

    @staticmethod
    def generate_user_id() -> str:
        return IDGenerator._generate_id()

    # ==================== INTEGRACIONES ====================

    @staticmethod
    def generate_integration_id() -> str:
        return IDGenerator._generate_id()
