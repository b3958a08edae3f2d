"""
Database initialization script.
Creates the tables and seeds a first administrator and driver when none exist.
"""
import logging
from sqlalchemy.orm import Session
from fleetledger.core.config import settings
from fleetledger.db.session import SessionLocal, init_db, write_transaction
from fleetledger.models import Admin, Driver
from fleetledger.services.auth_service import set_password

logger = logging.getLogger(__name__)


def seed_initial_accounts(db: Session) -> None:
    """Create the initial admin and driver on an empty database."""
    with write_transaction(db, "seed initial accounts"):
        if db.query(Admin).count() == 0:
            admin = Admin(name=settings.SEED_ADMIN_NAME.upper())
            set_password(admin, settings.SEED_PASSWORD)
            db.add(admin)
            logger.info(f"Seeded admin {admin.name}")
        if db.query(Driver).count() == 0:
            driver = Driver(name=settings.SEED_DRIVER_NAME.upper(), cnh="", phone="")
            set_password(driver, settings.SEED_PASSWORD)
            db.add(driver)
            logger.info(f"Seeded driver {driver.name}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    print("Initializing database...")
    init_db()
    session = SessionLocal()
    try:
        seed_initial_accounts(session)
    finally:
        session.close()
    print("Database initialized successfully!")
