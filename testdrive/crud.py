# testdrive/crud.py
"""Data-access helpers for users, cars, test-drive requests and testimonials.

Functions here only read and write rows; authorization and business rules
live in ``testdrive.services``.
"""
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from .models import ACTIVE_STATUSES, Car, TestDriveRequest, Testimonial, User


def _apply(obj, updates: Dict[str, Any]):
    for k, v in updates.items():
        setattr(obj, k, v)
    return obj


def _save(db: Session, obj):
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


# --- users -----------------------------------------------------------------

def get_user(db: Session, user_id: str) -> Optional[User]:
    return db.get(User, user_id)

def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email.strip().lower()).first()

def create_user(db: Session, data: Dict[str, Any]) -> User:
    data = dict(data, email=data["email"].strip().lower())
    return _save(db, User(**data))

def update_user(db: Session, user: User, updates: Dict[str, Any]) -> User:
    if "email" in updates:
        updates = dict(updates, email=updates["email"].strip().lower())
    return _save(db, _apply(user, updates))


# --- cars ------------------------------------------------------------------

def get_car(db: Session, car_id: str, with_owner: bool = False) -> Optional[Car]:
    q = db.query(Car)
    if with_owner:
        q = q.options(joinedload(Car.owner))
    return q.filter(Car.id == car_id).first()

def list_available_cars(db: Session, keyword: Optional[str] = None) -> List[Car]:
    q = db.query(Car).options(joinedload(Car.owner)).filter(Car.is_available.is_(True))
    if keyword:
        pattern = f"%{keyword}%"
        q = q.filter(or_(
            Car.make.ilike(pattern),
            Car.model.ilike(pattern),
            Car.location.ilike(pattern),
            Car.description.ilike(pattern),
        ))
    return q.order_by(Car.created_at.desc()).all()

def list_cars_by_owner(db: Session, owner_id: str) -> List[Car]:
    return db.query(Car).filter(Car.owner_id == owner_id).order_by(Car.created_at.desc()).all()

def create_car(db: Session, data: Dict[str, Any]) -> Car:
    return _save(db, Car(**data))

def update_car(db: Session, car: Car, updates: Dict[str, Any]) -> Car:
    return _save(db, _apply(car, updates))

def delete_car(db: Session, car: Car) -> None:
    # terminal requests go with the car; callers must check for active ones first
    db.query(TestDriveRequest).filter(TestDriveRequest.car_id == car.id).delete(synchronize_session=False)
    db.delete(car)
    db.commit()


# --- test-drive requests ---------------------------------------------------

def _request_query(db: Session):
    return db.query(TestDriveRequest).options(
        joinedload(TestDriveRequest.journalist),
        joinedload(TestDriveRequest.owner),
        joinedload(TestDriveRequest.car).joinedload(Car.owner),
    )

def get_request(db: Session, request_id: str, with_details: bool = False) -> Optional[TestDriveRequest]:
    q = _request_query(db) if with_details else db.query(TestDriveRequest)
    return q.filter(TestDriveRequest.id == request_id).first()

def find_active_request(db: Session, journalist_id: str, car_id: str) -> Optional[TestDriveRequest]:
    return _request_query(db).filter(
        TestDriveRequest.journalist_id == journalist_id,
        TestDriveRequest.car_id == car_id,
        TestDriveRequest.status.in_(ACTIVE_STATUSES),
    ).first()

def count_active_requests_for_car(db: Session, car_id: str) -> int:
    return db.query(TestDriveRequest).filter(
        TestDriveRequest.car_id == car_id,
        TestDriveRequest.status.in_(ACTIVE_STATUSES),
    ).count()

def list_requests_for_owner(db: Session, owner_id: str) -> List[TestDriveRequest]:
    return _request_query(db).filter(TestDriveRequest.owner_id == owner_id) \
        .order_by(TestDriveRequest.created_at.desc()).all()

def list_requests_for_journalist(db: Session, journalist_id: str) -> List[TestDriveRequest]:
    return _request_query(db).filter(TestDriveRequest.journalist_id == journalist_id) \
        .order_by(TestDriveRequest.created_at.desc()).all()

def create_request(db: Session, data: Dict[str, Any]) -> TestDriveRequest:
    return _save(db, TestDriveRequest(**data))

def update_request(db: Session, request: TestDriveRequest, updates: Dict[str, Any]) -> TestDriveRequest:
    return _save(db, _apply(request, updates))

def delete_request(db: Session, request: TestDriveRequest) -> None:
    db.delete(request)
    db.commit()


# --- testimonials ----------------------------------------------------------

def get_testimonial(db: Session, testimonial_id: str) -> Optional[Testimonial]:
    return db.get(Testimonial, testimonial_id)

def list_active_testimonials(db: Session) -> List[Testimonial]:
    return db.query(Testimonial).filter(Testimonial.is_active.is_(True)) \
        .order_by(Testimonial.created_at.desc()).all()

def create_testimonial(db: Session, data: Dict[str, Any]) -> Testimonial:
    return _save(db, Testimonial(**data))

def update_testimonial(db: Session, testimonial: Testimonial, updates: Dict[str, Any]) -> Testimonial:
    return _save(db, _apply(testimonial, updates))

def delete_testimonial(db: Session, testimonial: Testimonial) -> None:
    db.delete(testimonial)
    db.commit()

def replace_testimonials(db: Session, rows: List[Dict[str, Any]]) -> int:
    db.query(Testimonial).delete()
    db.add_all([Testimonial(**r) for r in rows])
    db.commit()
    return len(rows)
