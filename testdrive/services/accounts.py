# testdrive/services/accounts.py
"""Account directory: registration, sign-in and profiles."""
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import crud, schemas
from ..errors import Conflict, InvalidInput, NotFound, Unauthorized
from ..models import Role, User
from ..security import TokenService, hash_password, verify_password
from ..utils import get_logger, is_valid_id

logger = get_logger("accounts")

SELF_SERVICE_ROLES = (Role.CAR_OWNER.value, Role.JOURNALIST.value)


def _check_role(role) -> Role:
    if role not in SELF_SERVICE_ROLES:
        raise InvalidInput("Invalid user role specified")
    return Role(role)


def _auth_out(user: User, tokens: TokenService) -> schemas.AuthOut:
    return schemas.AuthOut(
        id=user.id, name=user.name, email=user.email, role=user.role,
        token=tokens.issue(user.id, user.role),
    )


def _insert_user(db: Session, data) -> User:
    try:
        return crud.create_user(db, data)
    except IntegrityError:
        # lost a race with a concurrent registration for the same email/uid
        db.rollback()
        raise Conflict("User already exists")


def register(db: Session, tokens: TokenService, payload: schemas.RegisterIn) -> schemas.AuthOut:
    role = _check_role(payload.role)
    if crud.get_user_by_email(db, payload.email):
        logger.warning("Registration rejected, email already present: %s", payload.email)
        raise Conflict("User already exists")
    user = _insert_user(db, {
        "name": payload.name,
        "email": payload.email,
        "password_hash": hash_password(payload.password),
        "role": role,
    })
    logger.info("Registered %s as %s", user.id, user.role.value)
    return _auth_out(user, tokens)


def authenticate(db: Session, tokens: TokenService, email: str, password: str) -> schemas.AuthOut:
    user = crud.get_user_by_email(db, email or "")
    # federated-only accounts have no password hash and never match
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("Failed login for %s", email)
        raise Unauthorized("Invalid email or password")
    return _auth_out(user, tokens)


def authenticate_federated(db: Session, tokens: TokenService, verifier, firebase_token, role) -> schemas.AuthOut:
    """Sign in with a Firebase ID token, creating the account on first use.

    The caller-supplied role is only trusted when the account is created;
    existing accounts keep their stored role.
    """
    if not firebase_token or not role:
        raise InvalidInput("Firebase token and role are required")
    role = _check_role(role)
    claims = verifier.verify(firebase_token)
    email = claims.get("email")
    if not email:
        raise Unauthorized("Firebase account has no email address")

    user = crud.get_user_by_email(db, email)
    if user is None:
        user = _insert_user(db, {
            "firebase_uid": claims["uid"],
            "email": email,
            "name": claims.get("name") or "Firebase User",
            "role": role,
        })
        logger.info("Created federated account %s as %s", user.id, user.role.value)
    elif not user.firebase_uid:
        user = crud.update_user(db, user, {"firebase_uid": claims["uid"]})
        logger.info("Linked firebase uid to account %s", user.id)
    return _auth_out(user, tokens)


def get_profile(db: Session, user_id: str) -> User:
    if not is_valid_id(user_id):
        raise InvalidInput("Invalid user ID format")
    user = crud.get_user(db, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


def get_public_profile(db: Session, user_id: str) -> schemas.PublicProfileOut:
    user = get_profile(db, user_id)
    profile = schemas.PublicProfileOut.model_validate(user)
    # only the sub-object matching the account's role is public
    if user.role != Role.JOURNALIST:
        profile.journalist_info = None
    if user.role != Role.CAR_OWNER:
        profile.owner_info = None
    return profile


def update_profile(db: Session, tokens: TokenService, user: User,
                   patch: schemas.ProfileUpdate) -> schemas.ProfileUpdateOut:
    data = patch.model_dump(exclude_unset=True)
    updates = {}
    for field in ("name", "phone", "location", "bio", "profile_image", "social_media"):
        if field in data:
            updates[field] = data[field]
    if "journalist_info" in data and user.role == Role.JOURNALIST:
        updates["journalist_info"] = data["journalist_info"]
    if "owner_info" in data and user.role == Role.CAR_OWNER:
        updates["owner_info"] = data["owner_info"]
    if data.get("email") and data["email"].lower() != user.email:
        if crud.get_user_by_email(db, data["email"]):
            raise Conflict("Email is already in use")
        updates["email"] = data["email"]
    if data.get("password"):
        updates["password_hash"] = hash_password(data["password"])

    try:
        user = crud.update_user(db, user, updates)
    except IntegrityError:
        db.rollback()
        raise Conflict("Email is already in use")
    logger.info("Updated profile %s (%s)", user.id, ", ".join(sorted(updates)) or "no changes")
    out = schemas.ProfileOut.model_validate(user)
    return schemas.ProfileUpdateOut(**out.model_dump(), token=tokens.issue(user.id, user.role))
