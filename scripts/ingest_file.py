# scripts/ingest_file.py
"""
Replace a dataset's images with the contents of a local CSV or COCO file.

    python scripts/ingest_file.py 3 captions.csv
"""
import argparse
import sys
from pathlib import Path

from captionhub.core.logging import logger
from captionhub.ingestion import IngestionError, ingest_upload


def main(argv=None):
    parser = argparse.ArgumentParser(description='Ingest a CSV or COCO caption file into a dataset')
    parser.add_argument('dataset_id', type=int, help='ID of the dataset to overwrite')
    parser.add_argument('path', type=Path, help='CSV or COCO JSON file')

    args = parser.parse_args(argv)

    try:
        with args.path.open("rb") as f:
            result = ingest_upload(args.dataset_id, f, filename=args.path.name)
    except IngestionError as e:
        logger.error(f"Ingestion failed: {e.message}")
        return 1

    print(result.message)
    for skip in result.skipped_sample:
        print(f"  skipped {skip.source_ref}: {skip.reason}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
