# run.py
import sys

import uvicorn

from captionhub.core.logging import logger


if __name__ == "__main__":
    logger.info("Starting Caption Dataset Hub...")
    try:
        uvicorn.run("captionhub.main:app", host="0.0.0.0", port=8000, reload=True)
    except Exception as e:
        logger.error(f"Error starting server: {str(e)}")
        sys.exit(1)
