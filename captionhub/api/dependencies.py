# captionhub/api/dependencies.py
from captionhub.ingestion.orchestrator import IngestionService, ingestion_service


def get_ingestion_service() -> IngestionService:
    """Shared ingestion service; tests override this dependency"""
    return ingestion_service
