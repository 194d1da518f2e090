# testdrive/api/testimonials.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import schemas
from ..db import get_db
from ..services import testimonials
from .deps import require_admin

router = APIRouter(prefix="/testimonials", tags=["testimonials"])


@router.get("", response_model=List[schemas.TestimonialOut])
def list_testimonials(db: Session = Depends(get_db)):
    return [schemas.TestimonialOut.model_validate(t) for t in testimonials.list_testimonials(db)]


@router.get("/{testimonial_id}", response_model=schemas.TestimonialOut)
def get_testimonial(testimonial_id: str, db: Session = Depends(get_db)):
    return schemas.TestimonialOut.model_validate(testimonials.get_testimonial(db, testimonial_id))


@router.post("", response_model=schemas.TestimonialOut, status_code=201,
             dependencies=[Depends(require_admin)])
def create_testimonial(payload: schemas.TestimonialCreate, db: Session = Depends(get_db)):
    return schemas.TestimonialOut.model_validate(testimonials.create_testimonial(db, payload))


@router.put("/{testimonial_id}", response_model=schemas.TestimonialOut,
            dependencies=[Depends(require_admin)])
def update_testimonial(testimonial_id: str, payload: schemas.TestimonialUpdate,
                       db: Session = Depends(get_db)):
    return schemas.TestimonialOut.model_validate(
        testimonials.update_testimonial(db, testimonial_id, payload))


@router.delete("/{testimonial_id}", response_model=schemas.MessageOut,
               dependencies=[Depends(require_admin)])
def delete_testimonial(testimonial_id: str, db: Session = Depends(get_db)):
    testimonials.delete_testimonial(db, testimonial_id)
    return schemas.MessageOut(message="Testimonial removed")
