# src/users/routes.py
from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import Any, Dict, List, Optional
from users.services import UserService
from users.schemas import UserDetail, UserTableRow
from results import ActionResult
from database import get_db

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/", response_model=List[UserTableRow])
def get_users(search: Optional[str] = None, db: Session = Depends(get_db)):
    """List customers, optionally filtered by name, email, phone or plate."""
    return UserService.generate_users_table_data(search, db)


@router.get("/detailed", response_model=List[UserDetail])
def get_detailed_users(db: Session = Depends(get_db)):
    """Full detail projection for every active customer."""
    return UserService.generate_detailed_users_data(db)


@router.get("/{user_id}", response_model=UserDetail)
def get_user(user_id: int, db: Session = Depends(get_db)):
    detail = UserService.get_user_detail(user_id, db)
    if not detail:
        raise HTTPException(status_code=404, detail="User not found")
    return detail


@router.put("/{user_id}", response_model=ActionResult)
def update_user(user_id: int, payload: Dict[str, Any] = Body(...), db: Session = Depends(get_db)):
    """Edit a customer profile."""
    return UserService.update_user({**payload, "id": user_id}, db)


@router.post("/{user_id}/notes", response_model=ActionResult)
def add_csr_note(user_id: int, payload: Dict[str, Any] = Body(...), db: Session = Depends(get_db)):
    return UserService.add_csr_note({**payload, "user_id": user_id}, db)
