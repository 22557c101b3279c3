import os
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

# The ledger database stands in for contract storage; keep it off public networks.
DB_URL = os.getenv("DEALROOM_LEDGER_DB_URL", "sqlite:///./ledger.db")

engine = create_engine(DB_URL, connect_args={"check_same_thread": False} if DB_URL.startswith("sqlite") else {})
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def init_db(bind=None):
    # Import models to register metadata before create_all.
    from . import models  # noqa: WPS433

    Base.metadata.create_all(bind=bind or engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
