"""MongoDB settings read from the environment."""

import os
from pathlib import Path

from dotenv import load_dotenv

from content_api.common.base_content_model import BaseContentModel

# .env at the project root
_project_dir = Path(__file__).parent.parent.parent
load_dotenv(_project_dir / ".env")


class MongoDBConfig(BaseContentModel):
    """Connection, transaction and GridFS settings."""

    connection_string: str
    database_name: str

    # GridFS bucket for uploaded images
    image_bucket_name: str = "content_images"
    gridfs_chunk_size_bytes: int = 255 * 1024
    max_upload_size_bytes: int = 10 * 1024 * 1024

    # Upper bound for committing one ordering transaction
    max_commit_time_ms: int = 5000
    server_selection_timeout_ms: int = 5000

    max_pool_size: int = 10
    min_pool_size: int = 1


def get_mongodb_config() -> MongoDBConfig:
    """Build the config from environment variables.

    Environment variables:
        MONGODB_CONNECTION_STRING: Replica set URI (required, transactions need one)
        MONGODB_DATABASE_NAME: Database name (default: content_dev)
        MONGODB_IMAGE_BUCKET: GridFS bucket for images (default: content_images)
        MONGODB_MAX_COMMIT_TIME_MS: Commit deadline per transaction (default: 5000)
    """
    connection_string = os.environ.get("MONGODB_CONNECTION_STRING", "")
    if not connection_string:
        msg = "MONGODB_CONNECTION_STRING environment variable is required"
        raise ValueError(msg)

    return MongoDBConfig(
        connection_string=connection_string,
        database_name=os.environ.get("MONGODB_DATABASE_NAME", "content_dev"),
        image_bucket_name=os.environ.get("MONGODB_IMAGE_BUCKET", "content_images"),
        max_commit_time_ms=int(os.environ.get("MONGODB_MAX_COMMIT_TIME_MS", "5000")),
    )
