from contextlib import contextmanager
from sqlalchemy.orm import Session
from rentclub.core.database import SessionLocal
from rentclub.core.logging_config import get_logger

logger = get_logger("db_transaction")


@contextmanager
def db_transaction(db: Session = None):
    """Run a unit of work: commit when the block finishes, roll back everything on error."""
    if db is None:
        db = SessionLocal()
        should_close = True
    else:
        should_close = False
    try:
        yield db
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Transaction rolled back: {str(e)}", exc_info=True)
        raise
    finally:
        if should_close:
            db.close()
