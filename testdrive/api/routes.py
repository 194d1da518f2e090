# testdrive/api/routes.py
from fastapi import APIRouter

from . import cars, requests, testimonials, users

router = APIRouter()

@router.get("/health")
def health():
    return {"status": "ok"}

router.include_router(users.router)
router.include_router(cars.router)
router.include_router(requests.router)
router.include_router(testimonials.router)
