"""
config.py

Central place to load environment variables.
"""

from dotenv import load_dotenv
import os

# Load variables from .env file into environment
load_dotenv()

# Vision model (document classification and extraction)
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
VISION_MODEL = os.getenv("VISION_MODEL", "gpt-4o-mini")

# Response length limits for the extraction and classification calls
VISION_MAX_TOKENS = int(os.getenv("VISION_MAX_TOKENS", "1500"))
CLASSIFY_MAX_TOKENS = int(os.getenv("CLASSIFY_MAX_TOKENS", "50"))

# Airtable record table
AIRTABLE_API_KEY = os.getenv("AIRTABLE_API_KEY")
AIRTABLE_BASE_ID = os.getenv("AIRTABLE_BASE_ID")
AIRTABLE_TABLE_ID = os.getenv("AIRTABLE_TABLE_ID")

# Airtable field ids for the four columns we write
AIRTABLE_TIPO_PESO_FIELD = os.getenv("AIRTABLE_TIPO_PESO_FIELD")
AIRTABLE_PESO_BASCULA_FIELD = os.getenv("AIRTABLE_PESO_BASCULA_FIELD")
AIRTABLE_PESO_CAMPO_FIELD = os.getenv("AIRTABLE_PESO_CAMPO_FIELD")
AIRTABLE_TOTAL_RACIMOS_FIELD = os.getenv("AIRTABLE_TOTAL_RACIMOS_FIELD")

# Optional attachment column for the archived photo
AIRTABLE_IMAGE_FIELD = os.getenv("AIRTABLE_IMAGE_FIELD")

# Optional blob storage for archiving source images
BLOB_READ_WRITE_TOKEN = os.getenv("BLOB_READ_WRITE_TOKEN")
BLOB_BASE_URL = os.getenv("BLOB_BASE_URL", "https://blob.vercel-storage.com")

# Timeout (seconds) for outgoing HTTP calls
REQUEST_TIMEOUT = int(os.getenv("REQUEST_TIMEOUT", "15"))

# Development server (run.py)
SERVER_HOST = os.getenv("SERVER_HOST", "0.0.0.0")
SERVER_PORT = int(os.getenv("SERVER_PORT", "8000"))
