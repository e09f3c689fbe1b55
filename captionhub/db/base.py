# captionhub/db/base.py
from captionhub.db.session import Base

# Import all models so they are registered on Base.metadata
from captionhub.models.user import User
from captionhub.models.api_key import ApiKey
from captionhub.models.dataset import Dataset
from captionhub.models.dataset_image import DatasetImage
from captionhub.models.dataset_activity import DatasetActivity
