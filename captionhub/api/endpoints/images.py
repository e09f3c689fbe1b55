# captionhub/api/endpoints/images.py
import math
import os
from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File, Query
from sqlalchemy.orm import Session
from typing import Optional

from captionhub.api.dependencies import get_ingestion_service
from captionhub.api.endpoints.datasets import get_visible_dataset
from captionhub.core.config import settings
from captionhub.core.logging import logger
from captionhub.db.session import get_db
from captionhub.ingestion.errors import (
    DatasetNotFoundError,
    DuplicateImageKeyError,
    EmptyResultError,
    IngestionError,
    IngestionInProgressError,
    PersistenceError,
    StructuralFormatError,
)
from captionhub.ingestion.orchestrator import IngestionService
from captionhub.middleware.auth import get_current_user, get_optional_user, can_modify_dataset
from captionhub.models.dataset import Dataset
from captionhub.models.dataset_activity import DatasetActivity, ActivityType
from captionhub.models.dataset_image import DatasetImage
from captionhub.models.user import User
from captionhub.schemas.image import DatasetImage as DatasetImageSchema, DatasetImagePage
from captionhub.schemas.ingest import IngestResponse, SkippedRecord

router = APIRouter()

INGESTION_STATUS = {
    StructuralFormatError: status.HTTP_400_BAD_REQUEST,
    EmptyResultError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    DuplicateImageKeyError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    DatasetNotFoundError: status.HTTP_404_NOT_FOUND,
    IngestionInProgressError: status.HTTP_409_CONFLICT,
    PersistenceError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def ingestion_status_code(error: IngestionError) -> int:
    for error_type, code in INGESTION_STATUS.items():
        if isinstance(error, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _upload_size(file: UploadFile) -> int:
    file.file.seek(0, os.SEEK_END)
    size = file.file.tell()
    file.file.seek(0)
    return size


@router.post("/{dataset_id}/upload", response_model=IngestResponse, status_code=status.HTTP_201_CREATED)
def upload_dataset_file(
    dataset_id: int,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: IngestionService = Depends(get_ingestion_service),
):
    """
    Replace every image of the dataset with the contents of a CSV or COCO file
    """
    dataset = db.query(Dataset).filter(Dataset.id == dataset_id).first()
    if not dataset:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Dataset not found"
        )

    if not can_modify_dataset(dataset, current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden"
        )

    if _upload_size(file) > settings.MAX_UPLOAD_SIZE:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File too large. Maximum size is {settings.MAX_UPLOAD_SIZE / 1024 / 1024} MB"
        )

    try:
        result = service.ingest_upload(dataset_id, file.file, filename=file.filename)
    except IngestionError as e:
        raise HTTPException(status_code=ingestion_status_code(e), detail=e.message)
    except Exception as e:
        logger.bind(dataset_id=dataset_id, user_id=current_user.id).exception(
            f"Unexpected error processing upload: {str(e)}"
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred while processing the upload"
        )

    db.add(DatasetActivity(
        activity_type=ActivityType.FILE_UPLOADED,
        user_id=current_user.id,
        dataset_id=dataset_id,
        file_name=(file.filename or "")[:255] or None,
        image_count=result.inserted_count,
        file_format=result.detected_format.value,
    ))
    db.commit()

    return IngestResponse(
        dataset_id=dataset_id,
        message=result.message,
        inserted_count=result.inserted_count,
        detected_format=result.detected_format.value,
        skipped_count=result.skipped_count,
        skipped_sample=[SkippedRecord(source_ref=s.source_ref, reason=s.reason) for s in result.skipped_sample],
        dimension_warnings=result.dimension_warnings,
    )


@router.get("/{dataset_id}/images", response_model=DatasetImagePage)
def get_dataset_images(
    dataset_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    """
    Images of a dataset in upload order, one page at a time
    """
    get_visible_dataset(dataset_id, db, current_user)

    query = db.query(DatasetImage).filter(DatasetImage.dataset_id == dataset_id)
    total = query.count()
    images = (
        query.order_by(DatasetImage.row_number)
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return DatasetImagePage(
        data=[DatasetImageSchema.model_validate(image) for image in images],
        total=total,
        page=page,
        last_page=math.ceil(total / limit),
    )
