import getpass
import os
from pathlib import Path

from dotenv import load_dotenv

from keyward.application.services.admin_auth_service import create_default_admin
from keyward.core.logging import configure_logging
from keyward.infrastructure.persistence.sqlite import SQLiteDatabase
from keyward.infrastructure.repositories.admin_repository import AdminRepository


def main() -> None:
    load_dotenv()
    configure_logging()

    database_path = Path(os.getenv("DATABASE_PATH", "data/keyward.db")).resolve()
    email = os.getenv("ADMIN_EMAIL") or input("Admin email: ").strip()
    password = os.getenv("ADMIN_PASSWORD") or getpass.getpass("Admin password: ").strip()

    if not email or len(password) < 6:
        raise RuntimeError("Provide ADMIN_EMAIL and an ADMIN_PASSWORD of at least 6 characters.")

    database = SQLiteDatabase(database_path)
    try:
        admin = create_default_admin(AdminRepository(database), email.strip().lower(), password)
    finally:
        database.close()

    if admin is None:
        print("Admin accounts already exist; nothing to do.")
    else:
        print(f"Super admin {admin.email} created (id: {admin.id}).")


if __name__ == "__main__":
    main()
