from contextlib import contextmanager

from sqlalchemy.orm import Session, sessionmaker

from merchant_dashboard.database.engine import engine

# Objects stay readable after commit; views rebuild their snapshot instead.
SessionLocal = sessionmaker(
    autoflush=False,
    expire_on_commit=False,
    bind=engine,
)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope(session_factory=SessionLocal):
    """Commit on success, roll back on error; used by scripts outside a request."""
    db: Session = session_factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
