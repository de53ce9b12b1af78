# crud/custom_activity.py
from typing import List, Dict, Any
from sqlalchemy.orm import Session

from perception_survey.models.custom_activity import CustomActivity


class CRUDCustomActivity:
    """CRUD operations for the admin-maintained activity catalog."""

    def get_all(self, db: Session) -> List[CustomActivity]:
        """Get the custom catalog ordered by id."""
        return db.query(CustomActivity).order_by(CustomActivity.id).all()

    def replace_all(self, db: Session, *, activities: List[Dict[str, Any]]) -> List[CustomActivity]:
        """Replace the whole catalog: delete every row, then insert the new list."""
        db.query(CustomActivity).delete(synchronize_session=False)

        db_objs = [CustomActivity(**activity) for activity in activities]
        db.add_all(db_objs)
        db.commit()
        return db_objs


crud_custom_activity = CRUDCustomActivity()
