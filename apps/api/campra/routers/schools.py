"""Schools router."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from campra.core.deps import get_db
from campra.repositories import schools
from campra.repositories.refs import ById, EntityNotFound
from campra.schemas.school import SchoolPacked, SchoolShowRequest

router = APIRouter(prefix="/api/schools", tags=["schools"])


@router.post("/show", response_model=SchoolPacked)
def show_school(body: SchoolShowRequest, db: Session = Depends(get_db)):
    try:
        return schools.pack(db, ById(body.school_id))
    except EntityNotFound:
        raise HTTPException(status_code=404, detail="School not found")
