"""
Migration script to enforce one contribution per participant per event.
Older databases may hold duplicate (event_id, user_id) rows; the duplicates are
removed before the unique index is created. A paid row is kept over an unpaid one.
"""
from sqlalchemy import inspect, text
from giftbuddy.db.session import SessionLocal
from giftbuddy.models.contribution import Contribution

INDEX_NAME = "uq_event_user_contribution"


def remove_duplicate_contributions(db) -> int:
    """Delete all but one contribution per (event_id, user_id). Returns the number removed."""
    kept = {}
    removed = 0
    rows = db.query(Contribution).order_by(
        Contribution.event_id, Contribution.user_id, Contribution.paid.desc(), Contribution.id
    ).all()
    for contribution in rows:
        key = (contribution.event_id, contribution.user_id)
        if key in kept:
            db.delete(contribution)
            removed += 1
        else:
            kept[key] = contribution.id
    return removed


def migrate(db=None):
    """Remove duplicate contributions and add the unique index."""
    owns_session = db is None
    if owns_session:
        db = SessionLocal()
    try:
        removed = remove_duplicate_contributions(db)
        db.flush()
        print(f"Removed {removed} duplicate contributions")

        # Check if index or constraint already exists
        inspector = inspect(db.connection())
        existing = {i["name"] for i in inspector.get_indexes("contributions")}
        existing |= {c["name"] for c in inspector.get_unique_constraints("contributions")}

        if INDEX_NAME not in existing:
            db.execute(text(f"""
                CREATE UNIQUE INDEX {INDEX_NAME}
                ON contributions (event_id, user_id)
            """))
            print(f"Created unique index {INDEX_NAME}")
        else:
            print(f"{INDEX_NAME} already exists, skipping index creation")

        db.commit()
        print("Migration completed successfully!")
        return removed
    except Exception as e:
        db.rollback()
        print(f"Migration failed: {e}")
        raise
    finally:
        if owns_session:
            db.close()


if __name__ == "__main__":
    migrate()
