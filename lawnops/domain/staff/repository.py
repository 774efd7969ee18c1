"""Staff repository - Database operations for staff members"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Staff


class StaffRepository:
    """Repository for staff database operations"""

    @staticmethod
    def get_staff_list(db: Session) -> list[Staff]:
        return db.query(Staff).order_by(Staff.name.asc()).all()

    @staticmethod
    def get_staff_by_id(db: Session, staff_id: int) -> Optional[Staff]:
        return db.query(Staff).filter(Staff.id == staff_id).first()

    @staticmethod
    def create_staff(db: Session, **staff_data) -> Staff:
        staff = Staff(**staff_data)
        db.add(staff)
        db.commit()
        db.refresh(staff)
        return staff

    @staticmethod
    def update_staff(db: Session, staff: Staff, **updates) -> Staff:
        for key, value in updates.items():
            if value is not None and hasattr(staff, key):
                setattr(staff, key, value)

        db.commit()
        db.refresh(staff)
        return staff
