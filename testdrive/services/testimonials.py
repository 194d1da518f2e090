"""Testimonials shown on the landing page; written by admins only."""
from typing import List

from sqlalchemy.orm import Session

from .. import crud, schemas
from ..errors import InvalidInput, NotFound
from ..models import Testimonial
from ..utils import get_logger, is_valid_id

logger = get_logger("testimonials")

DEFAULT_TESTIMONIALS = [
    {
        "name": "Ananya Verma",
        "role": "Automobile Journalist",
        "image": "https://randomuser.me/api/portraits/women/45.jpg",
        "text": "CrucialCars helped me find the perfect car for my latest article. "
                "The process was seamless, and the car owner was very accommodating!",
    },
    {
        "name": "Rohan Mehta",
        "role": "Car Enthusiast",
        "image": "https://randomuser.me/api/portraits/men/50.jpg",
        "text": "As a car owner, I love sharing my vehicle with influencers. "
                "CrucialCars makes it easy to connect and earn extra income.",
    },
    {
        "name": "Priya Singh",
        "role": "Travel Blogger",
        "image": "https://randomuser.me/api/portraits/women/33.jpg",
        "text": "I used CrucialCars to find unique vehicles for my road trip series. "
                "The variety of cars available was impressive, and the owners were fantastic!",
    },
    {
        "name": "Arjun Kumar",
        "role": "Automotive Photographer",
        "image": "https://randomuser.me/api/portraits/men/75.jpg",
        "text": "Finding unique cars for photoshoots has never been easier. "
                "CrucialCars has become my go-to platform for discovering eye-catching vehicles.",
    },
]


def list_testimonials(db: Session) -> List[Testimonial]:
    return crud.list_active_testimonials(db)


def get_testimonial(db: Session, testimonial_id: str) -> Testimonial:
    if not is_valid_id(testimonial_id):
        raise InvalidInput("Invalid testimonial ID format")
    testimonial = crud.get_testimonial(db, testimonial_id)
    if testimonial is None:
        raise NotFound("Testimonial not found")
    return testimonial


def create_testimonial(db: Session, payload: schemas.TestimonialCreate) -> Testimonial:
    testimonial = crud.create_testimonial(db, payload.model_dump())
    logger.info("Testimonial %s created", testimonial.id)
    return testimonial


def update_testimonial(db: Session, testimonial_id: str, patch: schemas.TestimonialUpdate) -> Testimonial:
    testimonial = get_testimonial(db, testimonial_id)
    updates = {k: v for k, v in patch.model_dump(exclude_unset=True).items() if v is not None}
    return crud.update_testimonial(db, testimonial, updates)


def delete_testimonial(db: Session, testimonial_id: str) -> None:
    testimonial = get_testimonial(db, testimonial_id)
    crud.delete_testimonial(db, testimonial)
    logger.info("Testimonial %s removed", testimonial_id)


def seed_defaults(db: Session) -> int:
    count = crud.replace_testimonials(db, DEFAULT_TESTIMONIALS)
    logger.info("%d testimonials inserted", count)
    return count
