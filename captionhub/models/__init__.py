# Import models here so they can be imported from captionhub.models
from captionhub.models.user import User
from captionhub.models.api_key import ApiKey
from captionhub.models.dataset import Dataset
from captionhub.models.dataset_image import DatasetImage
from captionhub.models.dataset_activity import DatasetActivity, ActivityType
