# testdrive/api/requests.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import schemas
from ..db import get_db
from ..models import User
from ..services import requests as lifecycle
from .deps import get_current_user, require_car_owner, require_journalist

router = APIRouter(prefix="/requests", tags=["requests"])


@router.post("", response_model=schemas.RequestOut, status_code=201)
def create_request(payload: schemas.RequestCreate, user: User = Depends(require_journalist),
                   db: Session = Depends(get_db)):
    return schemas.RequestOut.model_validate(lifecycle.create_request(db, user, payload))


# fixed paths first so they are not captured by /{request_id}
@router.get("/incoming", response_model=List[schemas.RequestOut])
def incoming(user: User = Depends(require_car_owner), db: Session = Depends(get_db)):
    return [schemas.RequestOut.model_validate(r) for r in lifecycle.list_incoming(db, user)]


@router.get("/outgoing", response_model=List[schemas.RequestOut])
def outgoing(user: User = Depends(require_journalist), db: Session = Depends(get_db)):
    return [schemas.RequestOut.model_validate(r) for r in lifecycle.list_outgoing(db, user)]


@router.get("/check/{car_id}", response_model=schemas.RequestOut)
def check_active(car_id: str, user: User = Depends(require_journalist), db: Session = Depends(get_db)):
    return schemas.RequestOut.model_validate(lifecycle.check_active(db, user, car_id))


@router.put("/{request_id}/status", response_model=schemas.RequestOut)
def update_status(request_id: str, payload: schemas.StatusUpdate,
                  user: User = Depends(require_car_owner), db: Session = Depends(get_db)):
    request = lifecycle.update_status(db, request_id, user, payload.status, payload.owner_response)
    return schemas.RequestOut.model_validate(request)


@router.get("/{request_id}", response_model=schemas.RequestDetailOut)
def get_request(request_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return schemas.RequestDetailOut.model_validate(lifecycle.get_request(db, request_id, user))


@router.delete("/{request_id}", response_model=schemas.WithdrawOut)
def withdraw(request_id: str, user: User = Depends(require_journalist), db: Session = Depends(get_db)):
    return lifecycle.withdraw(db, request_id, user)
