# captionhub/ingestion/sink.py
from typing import Iterable, List, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from captionhub.core.config import settings
from captionhub.core.logging import logger
from captionhub.ingestion.errors import DatasetNotFoundError, PersistenceError
from captionhub.ingestion.records import ImageRecord
from captionhub.models.dataset import Dataset
from captionhub.models.dataset_image import DatasetImage


class ImageSink(Protocol):
    def replace_all_images(self, dataset_id: int, records: Iterable[ImageRecord]) -> int:
        """
        Replace every image of the dataset with `records` as one unit.

        Returns the number of images stored. On failure nothing changes.
        """
        ...


def to_dataset_image(dataset_id: int, record: ImageRecord) -> DatasetImage:
    return DatasetImage(
        dataset_id=dataset_id,
        img_key=record.image_key,
        row_number=record.order_index,
        filename=record.filename,
        url=record.primary_url,
        width=record.width,
        height=record.height,
        prompt=record.caption,
        coco_image_id=record.external_image_id,
        additional_captions=list(record.additional_captions) or None,
        license=record.license,
        flickr_url=record.secondary_url,
    )


class SQLAlchemyImageSink:
    """
    Stores ingested images with SQLAlchemy.

    The delete of the old images and every insert of the new ones share a
    single transaction. `records` is consumed lazily in batches, so a
    streaming parser feeding it keeps memory bounded; if that parser fails
    half way, the transaction is rolled back and its error re-raised.
    """

    def __init__(self, session_factory: sessionmaker, batch_size: Optional[int] = None):
        self.session_factory = session_factory
        self.batch_size = batch_size or settings.INGEST_INSERT_BATCH_SIZE

    def replace_all_images(self, dataset_id: int, records: Iterable[ImageRecord]) -> int:
        db: Session = self.session_factory()
        try:
            # Row lock serializes writers across processes where the backend supports it
            dataset = (
                db.query(Dataset)
                .filter(Dataset.id == dataset_id)
                .with_for_update()
                .first()
            )
            if dataset is None:
                raise DatasetNotFoundError(dataset_id)

            deleted = (
                db.query(DatasetImage)
                .filter(DatasetImage.dataset_id == dataset_id)
                .delete(synchronize_session=False)
            )

            inserted = 0
            batch: List[DatasetImage] = []
            for record in records:
                batch.append(to_dataset_image(dataset_id, record))
                if len(batch) >= self.batch_size:
                    inserted += self._flush(db, batch)
                    batch = []
            if batch:
                inserted += self._flush(db, batch)

            db.commit()
            logger.bind(dataset_id=dataset_id, deleted=deleted, inserted=inserted).info(
                "Replaced dataset images"
            )
            return inserted
        except SQLAlchemyError as e:
            db.rollback()
            logger.bind(dataset_id=dataset_id).error(f"Error saving images to database: {str(e)}")
            raise PersistenceError("Error saving images to database") from e
        except BaseException:
            db.rollback()
            raise
        finally:
            db.close()

    @staticmethod
    def _flush(db: Session, batch: List[DatasetImage]) -> int:
        db.add_all(batch)
        db.flush()
        # Drop flushed rows from the identity map so long uploads stay bounded
        for image in batch:
            db.expunge(image)
        return len(batch)
