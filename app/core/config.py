"""
Configuración centralizada usando Pydantic Settings
Carga variables de entorno desde .env
"""

from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional, Union

from sqlalchemy.engine import URL


class Settings(BaseSettings):
    """
    Settings del proyecto

    Todas las variables de entorno se cargan automáticamente
    desde el archivo .env
    """

    # App
    APP_NAME: str = "LupoHub Backend"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    PORT: int = 3001

    # Database (MySQL)
    DB_HOST: str = "localhost"
    DB_USER: str = "root"
    DB_PASSWORD: str = ""
    DB_NAME: str = "lupohub"
    DB_PORT: int = 3306
    # Si está definida, reemplaza la URL armada con DB_* (ej: sqlite:// en tests)
    DATABASE_URL: Optional[str] = None

    # Security
    JWT_SECRET: str = "devsecret"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 120

    # CORS
    ALLOWED_ORIGINS: str = "*"
    FRONTEND_URL: str = "http://localhost:3000"

    # Mercado Libre
    MERCADO_LIBRE_APP_ID: str = ""
    MERCADO_LIBRE_CLIENT_SECRET: str = ""
    MERCADO_LIBRE_REDIRECT_URI: str = ""

    # Tienda Nube
    TIENDA_NUBE_APP_ID: str = ""
    TIENDA_NUBE_CLIENT_SECRET: str = ""
    TIENDA_NUBE_REDIRECT_URI: str = ""
    TIENDA_NUBE_USER_AGENT: str = "LupoHub (lupohub@example.com)"

    # Integraciones
    DEFAULT_TENANT: str = "default"
    HTTP_TIMEOUT_SECONDS: float = 30.0

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def database_url(self) -> Union[str, URL]:
        """URL de SQLAlchemy (MySQL vía PyMySQL salvo override)"""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        # URL.create escapa usuario y contraseña (@ / # :)
        return URL.create(
            "mysql+pymysql",
            username=self.DB_USER,
            password=self.DB_PASSWORD,
            host=self.DB_HOST,
            port=self.DB_PORT,
            database=self.DB_NAME,
            query={"charset": "utf8mb4"},
        )

    @property
    def allowed_origins(self) -> list:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]


@lru_cache()
def get_settings() -> Settings:
    """
    Singleton pattern: Solo carga settings una vez
    """
    return Settings()
