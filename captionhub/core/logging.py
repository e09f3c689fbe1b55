import os
import sys
import json
from loguru import logger as loguru_logger

from captionhub.core.config import settings

# Remove default logger
loguru_logger.remove()


class CloudLoggingAdapter:
    """
    Adapter to convert Loguru log records to Cloud Logging compatible JSON format
    """
    def __init__(self):
        self.env = os.getenv("ENV", "development")
        self.service_name = settings.PROJECT_NAME

    def write(self, message):
        record = message.record

        # Basic structure required by Cloud Logging
        cloud_log = {
            "severity": record["level"].name,
            "time": record["time"].isoformat(),
            "message": record["message"],
            "logger": record["name"],
            "logging.googleapis.com/labels": {
                "environment": self.env,
                "service": self.service_name
            }
        }

        # Structured context attached through logger.bind(...)
        for k, v in record["extra"].items():
            cloud_log[k] = v

        if record["exception"] is not None:
            exc_type, exc_value, _ = record["exception"]
            cloud_log["exception"] = f"{exc_type.__name__}: {exc_value}" if exc_type else str(exc_value)

        print(json.dumps(cloud_log, default=str), file=sys.stderr)


if settings.LOG_JSON:
    loguru_logger.configure(
        handlers=[
            {
                "sink": CloudLoggingAdapter().write,
                "level": settings.LOG_LEVEL,
                "format": "{message}",
            }
        ]
    )
else:
    loguru_logger.configure(
        handlers=[
            {
                "sink": sys.stderr,
                "level": settings.LOG_LEVEL,
                "format": "{time:YYYY-MM-DD HH:mm:ss} - {name} - {level} - {message} {extra}",
            }
        ]
    )

# Export the logger
logger = loguru_logger
