#!/usr/bin/env python3
"""
Create a Vermietertools user from the command line.

Usage:
    python scripts/create_user.py
    python scripts/create_user.py --name "Erika Muster" --email erika@example.com

The password is always read interactively (twice) and never echoed.
"""

import argparse
import asyncio
import getpass
import sys

from vermietertools.core.config import get_settings
from vermietertools.core.exceptions import VermieterError
from vermietertools.core.logging_config import setup_logging
from vermietertools.core.security import Authenticator, PasswordHasher
from vermietertools.services.database_service import DatabaseConfig, DatabaseService


def read_password() -> str:
    password = getpass.getpass("Passwort: ")
    repeated = getpass.getpass("Passwort wiederholen: ")
    if password != repeated:
        print("❌ Passwörter stimmen nicht überein")
        sys.exit(1)
    return password


async def create_user(name: str, email: str, password: str) -> int:
    settings = get_settings()
    database = DatabaseService(DatabaseConfig(
        url=settings.DATABASE_URL,
        echo=settings.DATABASE_ECHO,
        create_schema=settings.DATABASE_CREATE_SCHEMA,
    ))
    authenticator = Authenticator(database, PasswordHasher(rounds=settings.BCRYPT_ROUNDS))

    try:
        await database.initialize()
        user = await authenticator.register(name, email, password)
    except VermieterError as e:
        print(f"❌ {e.message}")
        return 1
    finally:
        await database.shutdown()

    print(f"✅ Benutzer angelegt: {user.email} (ID {user.id})")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Vermietertools-Benutzer anlegen")
    parser.add_argument("--name", help="Anzeigename")
    parser.add_argument("--email", help="E-Mail-Adresse (Login)")
    args = parser.parse_args()

    setup_logging()

    name = args.name or input("Name: ").strip()
    email = args.email or input("E-Mail: ").strip()
    password = read_password()

    sys.exit(asyncio.run(create_user(name, email, password)))


if __name__ == "__main__":
    main()
