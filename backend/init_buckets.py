import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv('.env')

from operators.storage_operator import GENERATED_IMAGES_BUCKET
from utils.gcs_utils import init_bucket


def init_buckets():
    cors_origins = [
        origin.strip()
        for origin in os.getenv(
            "CORS_ORIGINS", "http://localhost:3000,http://localhost:5173"
        ).split(",")
        if origin.strip()
    ]

    print(f"Initializing bucket: {GENERATED_IMAGES_BUCKET}")
    if init_bucket(GENERATED_IMAGES_BUCKET, cors_origins=cors_origins):
        print(f"Bucket {GENERATED_IMAGES_BUCKET} ready with CORS for {', '.join(cors_origins)}")
    else:
        print(f"Error initializing bucket {GENERATED_IMAGES_BUCKET}")


if __name__ == "__main__":
    init_buckets()
