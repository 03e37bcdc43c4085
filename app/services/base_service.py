from typing import Type, TypeVar, Optional, List
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from exceptions import NotFoundError, PersistenceError

ModelType = TypeVar("ModelType")


class BaseService:
    """Plain CRUD over one ORM model. Store failures surface as PersistenceError."""

    entity_name = "Record"

    def __init__(self, model: Type[ModelType]):
        self.model = model

    def get(self, db: Session, id: int) -> Optional[ModelType]:
        return db.query(self.model).filter(self.model.id == id).first()

    def get_or_404(self, db: Session, id: int) -> ModelType:
        db_obj = self.get(db, id)
        if db_obj is None:
            raise NotFoundError(f"{self.entity_name} {id} not found")
        return db_obj

    def get_all(self, db: Session, skip: int = 0, limit: int = 100) -> List[ModelType]:
        return db.query(self.model).order_by(self.model.id).offset(skip).limit(limit).all()

    def create(self, db: Session, obj_in) -> ModelType:
        """
        Create a new record in the database

        Args:
            db: Database session
            obj_in: Either a SQLAlchemy model or a Pydantic schema

        Returns:
            The created model instance
        """
        if isinstance(obj_in, BaseModel):
            db_obj = self.model(**obj_in.model_dump())
        else:
            db_obj = obj_in

        db.add(db_obj)
        self.commit(db)
        db.refresh(db_obj)
        return db_obj

    def update(self, db: Session, db_obj: ModelType, values: dict) -> ModelType:
        for key, value in values.items():
            setattr(db_obj, key, value)
        self.commit(db)
        db.refresh(db_obj)
        return db_obj

    def delete(self, db: Session, id: int) -> bool:
        db_obj = self.get(db, id)
        if not db_obj:
            return False
        db.delete(db_obj)
        self.commit(db)
        return True

    def commit(self, db: Session) -> None:
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise PersistenceError(f"Failed to save {self.entity_name.lower()}: {str(e)}") from e
