# testdrive/services/requests.py
"""Test-drive request lifecycle.

A request starts ``Pending``; the car owner moves it to ``Approved``,
``Rejected`` or ``Completed``. The journalist may withdraw (delete) it while
it is still ``Pending``. A journalist holds at most one active (Pending or
Approved) request per car: checked before insert and backed by a partial
unique index, so a concurrent duplicate insert surfaces as ``Conflict``.

Status updates accept any of the three owner statuses regardless of the
current one; there is no stricter transition table.
"""
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import crud, schemas
from ..errors import Conflict, Forbidden, InvalidInput, InvalidState, NotFound
from ..models import RequestStatus, TestDriveRequest, User
from ..utils import get_logger, is_valid_id

logger = get_logger("requests")

OWNER_STATUSES = (RequestStatus.APPROVED, RequestStatus.REJECTED, RequestStatus.COMPLETED)

DUPLICATE_MESSAGE = "You already have an active test drive request for this car."


def _load(db: Session, request_id: str, with_details: bool = False) -> TestDriveRequest:
    if not is_valid_id(request_id):
        raise InvalidInput("Invalid request ID format")
    request = crud.get_request(db, request_id, with_details=with_details)
    if request is None:
        raise NotFound("Test drive request not found")
    return request


def create_request(db: Session, journalist: User, payload: schemas.RequestCreate) -> TestDriveRequest:
    if not is_valid_id(payload.car_id):
        raise InvalidInput("Invalid car ID format")
    car = crud.get_car(db, payload.car_id)
    if car is None:
        raise NotFound("Car not found")
    if not car.is_available:
        raise InvalidState("This car is currently not available for test drives")
    if car.owner_id == journalist.id:
        raise InvalidState("You cannot request a test drive for your own car")
    if crud.find_active_request(db, journalist.id, car.id):
        logger.warning("Duplicate active request: journalist=%s car=%s", journalist.id, car.id)
        raise Conflict(DUPLICATE_MESSAGE)

    try:
        request = crud.create_request(db, {
            "journalist_id": journalist.id,
            "car_id": car.id,
            "owner_id": car.owner_id,
            "requested_date_time": payload.requested_date_time,
            "message": payload.message,
            "status": RequestStatus.PENDING,
        })
    except IntegrityError:
        # a concurrent insert for the same pair won the race
        db.rollback()
        logger.info("Active request index rejected insert: journalist=%s car=%s", journalist.id, car.id)
        raise Conflict(DUPLICATE_MESSAGE)
    logger.info("Request %s created: journalist=%s car=%s owner=%s",
                request.id, journalist.id, car.id, car.owner_id)
    return request


def list_incoming(db: Session, owner: User) -> List[TestDriveRequest]:
    return crud.list_requests_for_owner(db, owner.id)


def list_outgoing(db: Session, journalist: User) -> List[TestDriveRequest]:
    return crud.list_requests_for_journalist(db, journalist.id)


def get_request(db: Session, request_id: str, caller: User) -> TestDriveRequest:
    request = _load(db, request_id, with_details=True)
    if caller.id not in (request.journalist_id, request.owner_id):
        raise Forbidden("User not authorized to view this request")
    return request


def update_status(db: Session, request_id: str, caller: User, status, owner_response=None) -> TestDriveRequest:
    allowed = [s.value for s in OWNER_STATUSES]
    if status not in allowed:
        raise InvalidInput(f"Invalid status. Must be one of: {', '.join(allowed)}")
    request = _load(db, request_id)
    if request.owner_id != caller.id:
        logger.warning("User %s tried to update request %s owned by %s", caller.id, request.id, request.owner_id)
        raise Forbidden("User not authorized to update this request")

    previous = request.status
    updates = {"status": RequestStatus(status)}
    if owner_response is not None:
        updates["owner_response"] = owner_response
    crud.update_request(db, request, updates)
    logger.info("Request %s: %s -> %s", request.id, previous.value, status)
    return crud.get_request(db, request.id, with_details=True)


def check_active(db: Session, journalist: User, car_id: str) -> TestDriveRequest:
    if not is_valid_id(car_id):
        raise InvalidInput("Invalid car ID format")
    request = crud.find_active_request(db, journalist.id, car_id)
    if request is None:
        raise NotFound("No active request found for this car")
    return request


def withdraw(db: Session, request_id: str, caller: User) -> schemas.WithdrawOut:
    request = _load(db, request_id)
    if request.journalist_id != caller.id:
        raise Forbidden("User not authorized to withdraw this request")
    if request.status != RequestStatus.PENDING:
        raise InvalidState(f"Cannot withdraw a request that is already {request.status.value}")
    out = schemas.WithdrawOut(
        message="Test drive request withdrawn successfully",
        request_id=request.id,
        car_id=request.car_id,
    )
    crud.delete_request(db, request)
    logger.info("Request %s withdrawn by %s", out.request_id, caller.id)
    return out
