# testdrive/api/users.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import schemas
from ..db import get_db
from ..models import User
from ..security import FirebaseVerifier, TokenService
from ..services import accounts
from .deps import get_current_user, get_firebase, get_tokens

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/register", response_model=schemas.AuthOut, status_code=201)
def register(payload: schemas.RegisterIn, db: Session = Depends(get_db),
             tokens: TokenService = Depends(get_tokens)):
    return accounts.register(db, tokens, payload)


@router.post("/login", response_model=schemas.AuthOut)
def login(payload: schemas.LoginIn, db: Session = Depends(get_db),
          tokens: TokenService = Depends(get_tokens)):
    return accounts.authenticate(db, tokens, payload.email, payload.password)


@router.post("/firebase-auth", response_model=schemas.AuthOut)
def firebase_auth(payload: schemas.FirebaseAuthIn, db: Session = Depends(get_db),
                  tokens: TokenService = Depends(get_tokens),
                  firebase: FirebaseVerifier = Depends(get_firebase)):
    return accounts.authenticate_federated(db, tokens, firebase, payload.firebase_token, payload.role)


@router.get("/profile", response_model=schemas.ProfileOut)
def get_profile(user: User = Depends(get_current_user)):
    return schemas.ProfileOut.model_validate(user)


@router.put("/profile", response_model=schemas.ProfileUpdateOut)
def update_profile(payload: schemas.ProfileUpdate, user: User = Depends(get_current_user),
                   db: Session = Depends(get_db), tokens: TokenService = Depends(get_tokens)):
    return accounts.update_profile(db, tokens, user, payload)


# must stay after /profile
@router.get("/{user_id}", response_model=schemas.PublicProfileOut)
def get_public_profile(user_id: str, db: Session = Depends(get_db)):
    return accounts.get_public_profile(db, user_id)
