from typing import Optional
import datetime

from sqlalchemy import DateTime, PrimaryKeyConstraint, String, Text, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


PLATFORMS = ('mercadolibre', 'tiendanube')


class Integration(Base):
    __tablename__ = 'integrations'
    __table_args__ = (
        PrimaryKeyConstraint('id', name='integrations_pkey'),
        UniqueConstraint('tenant', 'platform', name='unique_tenant_platform'),
        {'comment': 'Credenciales OAuth por tenant y plataforma.'}
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    tenant: Mapped[str] = mapped_column(String(100), nullable=False, server_default=text("'default'"))
    platform: Mapped[str] = mapped_column(String(50), nullable=False)
    access_token: Mapped[str] = mapped_column(Text, nullable=False)
    refresh_token: Mapped[Optional[str]] = mapped_column(Text)
    expires_at: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime)
    user_id: Mapped[Optional[str]] = mapped_column(String(100))
    store_id: Mapped[Optional[str]] = mapped_column(String(100))
    created_at: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime, server_default=text('CURRENT_TIMESTAMP'))
    updated_at: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime, server_default=text('CURRENT_TIMESTAMP'))
