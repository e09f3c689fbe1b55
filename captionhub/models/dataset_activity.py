# captionhub/models/dataset_activity.py
import enum

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Enum, func
from sqlalchemy.orm import relationship

from captionhub.db.session import Base


class ActivityType(str, enum.Enum):
    DATASET_CREATED = "dataset_created"
    FILE_UPLOADED = "file_uploaded"


class DatasetActivity(Base):
    __tablename__ = "dataset_activity"

    id = Column(Integer, primary_key=True, index=True)
    activity_type = Column(Enum(ActivityType, values_callable=lambda e: [m.value for m in e]), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    dataset_id = Column(Integer, ForeignKey("datasets.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, server_default=func.now())

    # Upload details
    file_name = Column(String(255), nullable=True)
    image_count = Column(Integer, nullable=True)
    file_format = Column(String(16), nullable=True)

    # Relationships
    user = relationship("User")
    dataset = relationship("Dataset")
