from uuid import UUID

from sqlalchemy.orm import Session

from devcamper.core.errors import NotFound


def get_or_404(db: Session, model, raw_id: str, label: str):
    """Load a row by id; malformed ids are reported as missing records."""
    try:
        row_id = UUID(str(raw_id or "").strip())
    except ValueError:
        raise NotFound(f"{label} not found with id of {raw_id}")
    row = db.get(model, row_id)
    if row is None:
        raise NotFound(f"{label} not found with id of {raw_id}")
    return row


def apply_updates(row, values: dict) -> None:
    for k, v in values.items():
        setattr(row, k, v)
