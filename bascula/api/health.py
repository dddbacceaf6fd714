"""
health.py (API)

Liveness check that also reports which upstream services are configured.
Only reports whether settings are present, never their values, and makes
no outgoing calls.
"""

from fastapi import APIRouter

from bascula import config

router = APIRouter()


@router.get(
    "",
    status_code=200,
    summary="Health check",
    description="Service liveness plus which upstreams (vision model, Airtable, blob storage) are configured"
)
def health_check():
    return {
        "status": "ok",
        "vision_model": config.VISION_MODEL,
        "upstreams": {
            "vision": bool(config.OPENAI_API_KEY),
            "records": bool(
                config.AIRTABLE_API_KEY
                and config.AIRTABLE_BASE_ID
                and config.AIRTABLE_TABLE_ID
            ),
            "image_archive": bool(config.BLOB_READ_WRITE_TOKEN),
        },
    }
