# scripts/seed_data.py
import argparse

import requests

from captionhub.db.init_db import setup_database
from captionhub.core.logging import logger


def main():
    """Main entry point for the script"""
    parser = argparse.ArgumentParser(description='Seed database for Caption Dataset Hub')
    parser.add_argument('--service-url', type=str, help='URL of the API service for a health check')

    args = parser.parse_args()

    logger.info("Seeding database...")
    setup_database()
    logger.info("Database seeded successfully.")

    if args.service_url:
        base_url = args.service_url.rstrip('/')
        try:
            response = requests.get(f"{base_url}/health", timeout=10)
            if response.status_code == 200:
                logger.info(f"API health check successful: {response.json()}")
            else:
                logger.error(f"API health check failed: {response.status_code}, {response.text}")
        except requests.RequestException as e:
            logger.error(f"Error accessing API: {str(e)}")


if __name__ == "__main__":
    main()
