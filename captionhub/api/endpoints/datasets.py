# captionhub/api/endpoints/datasets.py
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Session
from typing import List, Optional

from captionhub.db.session import get_db
from captionhub.middleware.auth import get_current_user, get_optional_user, can_view_dataset
from captionhub.models.user import User
from captionhub.models.dataset import Dataset
from captionhub.models.dataset_activity import DatasetActivity, ActivityType
from captionhub.schemas.dataset import (
    Dataset as DatasetSchema,
    DatasetActivity as DatasetActivitySchema,
    DatasetCreate,
)

router = APIRouter()


def get_visible_dataset(dataset_id: int, db: Session, user: Optional[User]) -> Dataset:
    """
    Load a dataset, raising 404 when missing and 403 when private to someone else
    """
    dataset = db.query(Dataset).filter(Dataset.id == dataset_id).first()
    if not dataset:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Dataset not found"
        )
    if not can_view_dataset(dataset, user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied"
        )
    return dataset


@router.get("/", response_model=List[DatasetSchema])
def get_datasets(
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
    skip: int = 0,
    limit: int = 100,
):
    """
    List datasets: admins see everything, users see public ones plus their own
    """
    query = db.query(Dataset)
    if current_user is None:
        query = query.filter(Dataset.is_public.is_(True))
    elif not current_user.is_admin:
        query = query.filter(or_(Dataset.is_public.is_(True), Dataset.user_id == current_user.id))

    return query.order_by(Dataset.id).offset(skip).limit(limit).all()


@router.post("/", response_model=DatasetSchema, status_code=status.HTTP_201_CREATED)
def create_dataset(
    dataset_in: DatasetCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Create a new dataset owned by the current user
    """
    dataset = Dataset(**dataset_in.model_dump(), user_id=current_user.id)
    db.add(dataset)
    db.flush()  # Flush to get dataset ID

    db.add(DatasetActivity(
        activity_type=ActivityType.DATASET_CREATED,
        user_id=current_user.id,
        dataset_id=dataset.id,
    ))
    db.commit()
    db.refresh(dataset)
    return dataset


@router.get("/{dataset_id}", response_model=DatasetSchema)
def get_dataset(
    dataset_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    """
    Get a specific dataset by ID
    """
    return get_visible_dataset(dataset_id, db, current_user)


@router.get("/{dataset_id}/activity", response_model=List[DatasetActivitySchema])
def get_dataset_activity(
    dataset_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
    limit: int = 50,
):
    """
    Most recent activity on a dataset, newest first
    """
    get_visible_dataset(dataset_id, db, current_user)
    return (
        db.query(DatasetActivity)
        .filter(DatasetActivity.dataset_id == dataset_id)
        .order_by(DatasetActivity.id.desc())
        .limit(limit)
        .all()
    )
