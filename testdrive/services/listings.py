# testdrive/services/listings.py
"""Listing store: car listings owned by car owners."""
from typing import List, Optional

from sqlalchemy.orm import Session

from .. import crud, schemas
from ..errors import Conflict, Forbidden, InvalidInput, NotFound
from ..models import Car, User
from ..utils import get_logger, is_valid_id

logger = get_logger("listings")


def get_car(db: Session, car_id: str) -> Car:
    if not is_valid_id(car_id):
        raise InvalidInput("Invalid car ID format")
    car = crud.get_car(db, car_id, with_owner=True)
    if car is None:
        raise NotFound("Car not found")
    return car


def owned_car(db: Session, car_id: str, caller: User, action: str) -> Car:
    car = get_car(db, car_id)
    if car.owner_id != caller.id:
        logger.warning("User %s tried to %s car %s owned by %s", caller.id, action, car.id, car.owner_id)
        raise Forbidden(f"User not authorized to {action} this car")
    return car


def create_car(db: Session, owner: User, payload: schemas.CarCreate, image: Optional[str] = None) -> Car:
    data = payload.model_dump()
    data.update(owner_id=owner.id, is_available=True, image=image, images=[image] if image else [])
    car = crud.create_car(db, data)
    logger.info("Owner %s listed car %s (%s %s)", owner.id, car.id, car.make, car.model)
    return car


def list_cars(db: Session, keyword: Optional[str] = None) -> List[Car]:
    return crud.list_available_cars(db, keyword.strip() if keyword else None)


def list_my_cars(db: Session, owner: User) -> List[Car]:
    return crud.list_cars_by_owner(db, owner.id)


def update_car(db: Session, car_id: str, caller: User, patch: schemas.CarUpdate,
               image: Optional[str] = None) -> Car:
    car = owned_car(db, car_id, caller, "update")
    updates = {k: v for k, v in patch.model_dump(exclude_unset=True).items() if v is not None}
    if image:
        updates["image"] = image
        updates["images"] = [image] + [i for i in (car.images or []) if i != image]
    car = crud.update_car(db, car, updates)
    logger.info("Car %s updated (%s)", car.id, ", ".join(sorted(updates)) or "no changes")
    return car


def delete_car(db: Session, car_id: str, caller: User) -> None:
    """Delete a listing together with its finished requests.

    Refused while a Pending or Approved request still references the car, so
    no request is ever left pointing at a missing listing.
    """
    car = owned_car(db, car_id, caller, "delete")
    active = crud.count_active_requests_for_car(db, car.id)
    if active:
        raise Conflict(f"Cannot delete a car with {active} active test drive request(s)")
    crud.delete_car(db, car)
    logger.info("Car %s deleted by %s", car_id, caller.id)


def toggle_availability(db: Session, car_id: str, caller: User) -> Car:
    car = owned_car(db, car_id, caller, "modify")
    car = crud.update_car(db, car, {"is_available": not car.is_available})
    logger.info("Car %s availability set to %s", car.id, car.is_available)
    return car
