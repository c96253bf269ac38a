from sqlalchemy.orm import Session

from campra.db.models import School
from campra.repositories.refs import Ref, resolve
from campra.schemas.school import SchoolPacked


def pack(db: Session, ref: Ref) -> SchoolPacked:
    school = resolve(db, School, ref)
    return SchoolPacked(
        id=school.id,
        name=school.name,
        logo_url=school.logo_url,
        is_demo=school.is_demo,
    )


def pack_many(db: Session, refs: list[Ref]) -> list[SchoolPacked]:
    return [pack(db, ref) for ref in refs]
