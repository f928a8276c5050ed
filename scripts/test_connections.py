#!/usr/bin/env python3
"""
Connection Test Script

Run this to verify the external services are reachable.
Usage: python scripts/test_connections.py
"""
import sys
sys.path.insert(0, '.')

from app.db.mongodb import test_mongo_connection
from app.services.image_storage import get_image_storage
from app.services.llm_client import get_llm_client
from app.core.config import get_settings


def main():
    settings = get_settings()
    print("=" * 50)
    print("CAREER INSTITUTE PLATFORM - CONNECTION TEST")
    print("=" * 50)

    # Test MongoDB
    print("\n[1] Testing MongoDB...")
    print(f"    URI: {settings.mongodb_uri}")
    print(f"    Database: {settings.mongodb_db}")
    if test_mongo_connection():
        print("    ✅ MongoDB: CONNECTED")
    else:
        print("    ❌ MongoDB: FAILED")

    # Test SMTP (configuration only; no mail is sent)
    print("\n[2] Checking SMTP...")
    if settings.smtp_enabled:
        print(f"    Host: {settings.smtp_host}:{settings.smtp_port} as {settings.smtp_from}")
    else:
        print("    ⚠️  SMTP: not configured (emails will be skipped)")

    # Test image store
    print("\n[3] Testing image store...")
    if settings.image_store_enabled:
        storage = get_image_storage()
        try:
            storage.client.head_bucket(Bucket=storage.bucket)
            print(f"    ✅ Bucket '{storage.bucket}': REACHABLE")
        except Exception as e:
            print(f"    ❌ Bucket '{storage.bucket}': FAILED ({e})")
    else:
        print("    ⚠️  Image store: not configured (uploads will fail)")

    # Test language model (only if API key is set)
    print("\n[4] Testing language model...")
    client = get_llm_client()
    if client is not None:
        print(f"    Model: {settings.openai_model}")
        if client.test_connection():
            print("    ✅ Language model: CONNECTED")
        else:
            print("    ❌ Language model: FAILED")
    else:
        print("    ⚠️  Language model: API key not configured (agent summaries are used)")

    print("\n" + "=" * 50)
    print("Connection test complete!")
    print("=" * 50)


if __name__ == "__main__":
    main()
