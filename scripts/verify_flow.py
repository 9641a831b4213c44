"""
End-to-end smoke run against a live server.

Translates the same text twice and expects a cache MISS then a HIT, then
uploads a small .txt document. Requires a server with a valid DEEPL_API key.

    BASE_URL=http://localhost:8080 python scripts/verify_flow.py
"""
import asyncio
import httpx
import logging
import sys

import os

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

BASE_URL = os.getenv("BASE_URL", "http://localhost:8080")
TARGET_LANG = os.getenv("TARGET_LANG", "DE")


async def check_health(client):
    resp = await client.get(f"{BASE_URL}/api/health")
    if resp.status_code != 200 or resp.text != "OK":
        logger.error(f"Health check failed: {resp.status_code} {resp.text}")
        return False
    logger.info("Health OK")
    return True


async def translate_text(client, text):
    payload = {"text": text, "source_lang": "EN", "target_lang": TARGET_LANG}
    resp = await client.post(f"{BASE_URL}/api/deepl/translate", json=payload)
    if resp.status_code != 200:
        logger.error(f"Text translation failed: {resp.status_code} {resp.text}")
        return None, None
    return resp.json()["translation"], resp.headers.get("X-Cache")


async def translate_file(client, name, content):
    resp = await client.post(
        f"{BASE_URL}/api/deepl/translate",
        files={"file": (name, content, "text/plain")},
        data={"target_lang": TARGET_LANG},
    )
    if resp.status_code != 200:
        logger.error(f"File translation failed: {resp.status_code} {resp.text}")
        return None
    logger.info(f"File translated: {resp.headers.get('Content-Disposition')} ({len(resp.content)} bytes)")
    return resp.content


async def run_scenario():
    async with httpx.AsyncClient(timeout=120.0) as client:
        if not await check_health(client):
            return 1

        # Unique text so the first call cannot already be cached
        text = ["Hello world", f"Smoke run {os.getpid()}"]

        first, first_cache = await translate_text(client, text)
        if first is None:
            return 1
        logger.info(f"First translation ({first_cache}): {first}")

        second, second_cache = await translate_text(client, text)
        if second is None:
            return 1
        logger.info(f"Second translation ({second_cache}): {second}")

        if first_cache != "MISS" or second_cache != "HIT" or first != second:
            logger.error("FAILED: expected MISS then HIT with identical bodies")
            return 1
        logger.info("SUCCESS: cache served the repeated request")

        if await translate_file(client, "smoke.txt", b"Good morning.\n") is None:
            return 1
        logger.info("SUCCESS: document translated")
        return 0

if __name__ == "__main__":
    sys.exit(asyncio.run(run_scenario()))
