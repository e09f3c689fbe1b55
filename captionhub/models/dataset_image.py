# captionhub/models/dataset_image.py
from sqlalchemy import Column, Integer, String, Text, ForeignKey, DateTime, UniqueConstraint, func, JSON
from sqlalchemy.orm import relationship

from captionhub.db.session import Base


class DatasetImage(Base):
    __tablename__ = "dataset_images"
    __table_args__ = (
        UniqueConstraint("dataset_id", "img_key", name="uq_dataset_images_dataset_key"),
    )

    id = Column(Integer, primary_key=True, index=True)
    dataset_id = Column(Integer, ForeignKey("datasets.id", ondelete="CASCADE"), nullable=False, index=True)
    img_key = Column(String, nullable=False)
    row_number = Column(Integer, nullable=False)
    filename = Column(String, nullable=False)
    url = Column(Text, nullable=False)
    width = Column(Integer, nullable=False, default=0)
    height = Column(Integer, nullable=False, default=0)
    prompt = Column(Text, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # COCO-specific fields
    coco_image_id = Column(Integer, nullable=True)
    additional_captions = Column(JSON, nullable=True)
    license = Column(String(255), nullable=True)
    flickr_url = Column(Text, nullable=True)

    # Relationships
    dataset = relationship("Dataset", back_populates="images")
