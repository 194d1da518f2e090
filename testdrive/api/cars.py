# testdrive/api/cars.py
"""Car listing endpoints.

Create and update accept either multipart form data (with an optional
``image`` file) or a JSON body.
"""
import os
import shutil
from typing import Any, Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends, Query, Request
from starlette.datastructures import UploadFile
from pydantic import ValidationError
from sqlalchemy.orm import Session

from .. import schemas
from ..config import Settings
from ..db import get_db
from ..errors import InvalidInput, format_validation_errors
from ..models import User
from ..services import listings
from ..utils import allowed_image, get_logger, new_id
from .deps import get_settings, require_car_owner

logger = get_logger("api.cars")

router = APIRouter(prefix="/cars", tags=["cars"])

CarForm = Tuple[Dict[str, Any], Optional[UploadFile]]


async def car_form(request: Request) -> CarForm:
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except ValueError:
            raise InvalidInput("Malformed JSON body")
        if not isinstance(body, dict):
            raise InvalidInput("Expected a JSON object")
        return body, None
    form = await request.form()
    data, image = {}, None
    for key, value in form.multi_items():
        if key == "image":
            if isinstance(value, UploadFile) and value.filename:
                image = value
            continue
        data[key] = value
    return data, image


def _validate(model, data):
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise InvalidInput(format_validation_errors(e.errors()))


def save_image(upload: Optional[UploadFile], settings: Settings) -> Optional[str]:
    if upload is None:
        return None
    if not allowed_image(upload.filename):
        raise InvalidInput("Invalid image format. Allowed: png, jpg, jpeg, gif, webp")
    ext = upload.filename.rsplit(".", 1)[1].lower()
    filename = f"{new_id()}.{ext}"
    os.makedirs(settings.upload_dir, exist_ok=True)
    with open(os.path.join(settings.upload_dir, filename), "wb") as fh:
        shutil.copyfileobj(upload.file, fh)
    logger.info("Stored upload %s as %s", upload.filename, filename)
    return f"/uploads/{filename}"


def discard_image(image: Optional[str], settings: Settings):
    if not image:
        return
    path = os.path.join(settings.upload_dir, os.path.basename(image))
    try:
        os.remove(path)
    except FileNotFoundError:
        return
    logger.info("Removed unreferenced upload %s", path)


@router.get("", response_model=List[schemas.CarOut])
def list_cars(keyword: Optional[str] = Query(None), db: Session = Depends(get_db)):
    return [schemas.CarOut.model_validate(c) for c in listings.list_cars(db, keyword)]


@router.post("", response_model=schemas.CarOut, status_code=201)
def create_car(user: User = Depends(require_car_owner), form: CarForm = Depends(car_form),
               db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    data, upload = form
    payload = _validate(schemas.CarCreate, data)
    image = save_image(upload, settings)
    try:
        car = listings.create_car(db, user, payload, image=image)
    except Exception:
        discard_image(image, settings)
        raise
    return schemas.CarOut.model_validate(car)


@router.get("/my-listings", response_model=List[schemas.CarOut])
@router.get("/my-listings/owner", response_model=List[schemas.CarOut], include_in_schema=False)
def my_listings(user: User = Depends(require_car_owner), db: Session = Depends(get_db)):
    return [schemas.CarOut.model_validate(c) for c in listings.list_my_cars(db, user)]


@router.get("/{car_id}", response_model=schemas.CarOut)
def get_car(car_id: str, db: Session = Depends(get_db)):
    return schemas.CarOut.model_validate(listings.get_car(db, car_id))


@router.put("/{car_id}", response_model=schemas.CarOut)
def update_car(car_id: str, user: User = Depends(require_car_owner), form: CarForm = Depends(car_form),
               db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    data, upload = form
    # forms resend untouched fields as empty strings
    patch = _validate(schemas.CarUpdate, {k: v for k, v in data.items() if v not in ("", None)})
    # ownership is checked before anything is written to the upload dir
    listings.owned_car(db, car_id, user, "update")
    image = save_image(upload, settings)
    try:
        car = listings.update_car(db, car_id, user, patch, image=image)
    except Exception:
        discard_image(image, settings)
        raise
    return schemas.CarOut.model_validate(car)


@router.delete("/{car_id}", response_model=schemas.MessageOut)
def delete_car(car_id: str, user: User = Depends(require_car_owner), db: Session = Depends(get_db)):
    listings.delete_car(db, car_id, user)
    return schemas.MessageOut(message="Car listing removed successfully")


@router.patch("/{car_id}/toggle-availability", response_model=schemas.ToggleAvailabilityOut)
def toggle_availability(car_id: str, user: User = Depends(require_car_owner),
                        db: Session = Depends(get_db)):
    car = listings.toggle_availability(db, car_id, user)
    return schemas.ToggleAvailabilityOut(
        message=f"Car availability set to {str(car.is_available).lower()}",
        is_available=car.is_available,
        car=schemas.CarOut.model_validate(car),
    )
