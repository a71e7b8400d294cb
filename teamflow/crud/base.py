from typing import Generic, TypeVar, Type, Optional, List, Any, Dict
from sqlalchemy.orm import Session
from sqlalchemy import select, func
from pydantic import BaseModel
from teamflow.core.tenant_scope import TenantScoped

ModelType = TypeVar("ModelType", bound=TenantScoped)


class CRUDTenantScoped(Generic[ModelType]):
    """
    Generic CRUD class for tenant-scoped models.

    Every read takes an explicit organization_id and always filters by it.
    Only models carrying the TenantScoped marker can be used here.

    Type Parameters:
        ModelType: SQLAlchemy model class inheriting TenantScoped
    """

    def __init__(self, model: Type[ModelType]):
        """
        Initialize CRUD object with model class.

        Args:
            model: SQLAlchemy model class

        Raises:
            TypeError: If the model is not tenant scoped
        """
        if not issubclass(model, TenantScoped):
            raise TypeError(f"{model.__name__} is not a TenantScoped model")
        self.model = model

    def get(self, db: Session, id: str, organization_id: str) -> Optional[ModelType]:
        """
        Retrieve a single record by ID with organization filtering.

        Returns:
            Model instance or None if not found or doesn't belong to the organization
        """
        stmt = select(self.model).where(
            self.model.id == id,
            self.model.organization_id == organization_id
        )
        result = db.execute(stmt)
        return result.scalar_one_or_none()

    def get_multi(
        self,
        db: Session,
        *,
        organization_id: str,
        skip: int = 0,
        limit: int = 100
    ) -> List[ModelType]:
        """
        Retrieve records of one organization, oldest first, with pagination.
        """
        stmt = select(self.model).where(
            self.model.organization_id == organization_id
        ).order_by(self.model.created_at, self.model.id).offset(skip).limit(limit)
        result = db.execute(stmt)
        return list(result.scalars().all())

    def count(self, db: Session, *, organization_id: str) -> int:
        stmt = select(func.count()).select_from(self.model).where(
            self.model.organization_id == organization_id
        )
        return db.execute(stmt).scalar_one()

    def update(
        self,
        db: Session,
        *,
        db_obj: ModelType,
        obj_in: BaseModel | Dict[str, Any]
    ) -> ModelType:
        """
        Update an existing record.

        Note: db_obj must have been loaded through get(), which ensures
        tenant isolation.
        """
        if isinstance(obj_in, dict):
            update_data = obj_in
        else:
            update_data = obj_in.model_dump(exclude_unset=True)

        for field, value in update_data.items():
            setattr(db_obj, field, value)

        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj
