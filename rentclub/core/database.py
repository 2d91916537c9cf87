from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from rentclub.core.config import settings
import os
from rentclub.core.logging_config import get_logger
logger = get_logger("database")

db_url = settings.DATABASE_URL
engine_kw = {"echo": settings.DB_ECHO, "pool_pre_ping": True}

if db_url.startswith("sqlite:///"):
    # Ensure database directory exists and is writable
    db_path = db_url.replace("sqlite:///", "")
    db_dir = os.path.dirname(db_path)
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)
        if not os.access(db_dir, os.W_OK):
            raise PermissionError(f"Database directory is not writable: {db_dir}")
    if os.path.exists(db_path) and not os.access(db_path, os.W_OK):
        raise PermissionError(f"Database file is not writable: {db_path}")

if db_url.startswith("sqlite"):
    engine_kw["connect_args"] = {
        "check_same_thread": False,
        "timeout": 20.0,  # Wait up to 20 seconds for locks
    }

engine = create_engine(db_url, **engine_kw)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
