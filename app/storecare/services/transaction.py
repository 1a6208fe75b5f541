from contextlib import contextmanager


@contextmanager
def transaction(db):
    """Commit once on success; roll back and re-raise on any failure."""
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
