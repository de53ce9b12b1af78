# crud/client_visibility.py
from typing import Optional, List
from sqlalchemy.orm import Session

from perception_survey.models.client_visibility import ClientActivityVisibility


class CRUDClientVisibility:
    """CRUD operations for ClientActivityVisibility model."""

    def get(
        self, db: Session, *, client_id: str, activity_id: int
    ) -> Optional[ClientActivityVisibility]:
        return (
            db.query(ClientActivityVisibility)
            .filter(
                ClientActivityVisibility.client_id == client_id,
                ClientActivityVisibility.activity_id == activity_id,
            )
            .first()
        )

    def get_all(self, db: Session) -> List[ClientActivityVisibility]:
        return db.query(ClientActivityVisibility).all()

    def get_for_clients(self, db: Session, *, client_ids: List[str]) -> List[ClientActivityVisibility]:
        """Get overrides for the given clients (e.g. a client and "default")."""
        return (
            db.query(ClientActivityVisibility)
            .filter(ClientActivityVisibility.client_id.in_(client_ids))
            .all()
        )

    def upsert(
        self, db: Session, *, client_id: str, activity_id: int, is_hidden: bool
    ) -> ClientActivityVisibility:
        """Insert or update the override keyed by (client_id, activity_id)."""
        db_obj = self.get(db, client_id=client_id, activity_id=activity_id)

        if db_obj is None:
            db_obj = ClientActivityVisibility(
                client_id=client_id, activity_id=activity_id, is_hidden=is_hidden
            )
            db.add(db_obj)
        else:
            db_obj.is_hidden = is_hidden

        db.commit()
        db.refresh(db_obj)
        return db_obj


crud_client_visibility = CRUDClientVisibility()
