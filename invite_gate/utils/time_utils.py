from datetime import datetime, timezone

def utcnow() -> datetime:
    """
    Current UTC time as a naive datetime.

    Claim timestamps are stored in plain DateTime columns, so every value
    written or compared must be naive UTC for the expiry and grace-window
    predicates to agree between PostgreSQL and SQLite.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)
