#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Script para crear un usuario (ADMIN, SELLER o WAREHOUSE)

La contraseña se guarda hasheada. Uso:

    python scripts/create_user.py --name "Ana" --email ana@lupo.com --password secreto --role ADMIN
"""
import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from app.core.database import SessionLocal  # noqa: E402
from app.core.exceptions import BaseAppException  # noqa: E402
from app.models import USER_ROLES  # noqa: E402
from app.services.auth_service import AuthService  # noqa: E402


def main(argv=None):
    parser = argparse.ArgumentParser(description="Crear usuario de LupoHub")
    parser.add_argument("--name", required=True)
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--role", default="SELLER", choices=USER_ROLES)
    parser.add_argument("--commission", type=float, default=None, help="Porcentaje de comisión (vendedores)")
    args = parser.parse_args(argv)

    db = SessionLocal()
    try:
        user = AuthService.create_user(
            db,
            name=args.name,
            email=args.email,
            password=args.password,
            role=args.role,
            commission_percentage=args.commission,
        )
    except BaseAppException as e:
        print(f"[!] {e.message}")
        return 1
    finally:
        db.close()

    print(f"[OK] Usuario creado: {user.email} ({user.role}) id={user.id}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
