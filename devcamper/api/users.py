from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from devcamper.api.auth import normalize_email
from devcamper.api.common import apply_updates, get_or_404
from devcamper.core.deps import get_list_query, require_role
from devcamper.core.security import hash_password
from devcamper.db.session import get_db
from devcamper.models.user import ROLE_ADMIN, User
from devcamper.schemas.auth import UserCreate, UserUpdate
from devcamper.schemas.query import ListQuery
from devcamper.services.advanced_results import advanced_results
from devcamper.services.serializers import USERS, user_out

router = APIRouter(dependencies=[Depends(require_role(ROLE_ADMIN))])

@router.get("")
def get_users(lq: ListQuery = Depends(get_list_query), db: Session = Depends(get_db)):
    return advanced_results(db, USERS, lq)

@router.get("/{id}")
def get_user(id: str, db: Session = Depends(get_db)):
    user = get_or_404(db, User, id, "User")
    return {"success": True, "data": user_out(user)}

@router.post("", status_code=201)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    user = User(
        name=payload.name.strip(),
        email=normalize_email(payload.email),
        role=payload.role,
        password_hash=hash_password(payload.password),
    )
    db.add(user); db.commit(); db.refresh(user)
    return {"success": True, "data": user_out(user)}

@router.put("/{id}")
def update_user(id: str, payload: UserUpdate, db: Session = Depends(get_db)):
    user = get_or_404(db, User, id, "User")
    values = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "password" in values:
        values["password_hash"] = hash_password(values.pop("password"))
    if "email" in values:
        values["email"] = normalize_email(values["email"])
    apply_updates(user, values)
    db.add(user); db.commit(); db.refresh(user)
    return {"success": True, "data": user_out(user)}

@router.delete("/{id}")
def delete_user(id: str, db: Session = Depends(get_db)):
    user = get_or_404(db, User, id, "User")
    db.delete(user); db.commit()
    return {"success": True, "data": {}}
