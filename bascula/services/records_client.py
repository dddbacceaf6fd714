"""
records_client.py

This module is responsible for communicating with the Airtable API,
where weighing records are kept.
The service NEVER talks to the table any other way.

Responsibilities:
- Handle authentication headers (personal access token)
- Map weighing totals to the configured Airtable field ids
- Turn HTTP failures into clear errors
"""

from typing import Any, Dict, Optional
import logging

import requests

from bascula.schemas.weighing import DocumentCategory, WeighingTotals

logger = logging.getLogger(__name__)


AIRTABLE_API_URL = "https://api.airtable.com/v0"


class AirtableRecordsClient:
    """
    AirtableRecordsClient is a thin wrapper over the Airtable REST API.

    This class:
    - Attaches Authorization headers
    - Sends JSON requests
    - Raises RuntimeError on missing configuration or API errors
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_id: Optional[str] = None,
        table_id: Optional[str] = None,
        *,
        tipo_peso_field: Optional[str] = None,
        peso_bascula_field: Optional[str] = None,
        peso_campo_field: Optional[str] = None,
        total_racimos_field: Optional[str] = None,
        image_field: Optional[str] = None,
        base_url: str = AIRTABLE_API_URL,
        timeout: int = 15
    ):
        """
        Initialize Airtable client.

        Parameters:
        - api_key: Airtable personal access token
        - base_id / table_id: target table for weighing records
        - *_field: Airtable field ids of the four written columns
        - image_field: optional attachment field for the source photo
        - base_url: API root (overridable for tests)
        - timeout: request timeout in seconds
        """

        self.api_key = api_key
        self.base_id = base_id
        self.table_id = table_id
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

        self.field_ids = {
            "tipo_peso": tipo_peso_field,
            "peso_bascula": peso_bascula_field,
            "peso_campo": peso_campo_field,
            "total_racimos": total_racimos_field,
        }
        self.image_field = image_field

    # ------------------------------------------------------------------
    # Internal request handler
    # ------------------------------------------------------------------
    def _request(
        self,
        method: str,
        endpoint: str,
        *,
        json_body: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Send one HTTP request to Airtable.

        Parameters:
        - method: HTTP method (GET, POST)
        - endpoint: API path, appended to base_url
        - json_body: JSON payload (if any)

        Returns:
        - Parsed JSON response

        Raises:
        - RuntimeError on network failure or non-2xx status
        """

        if not self.api_key:
            raise RuntimeError("AIRTABLE_API_KEY is not configured")

        url = f"{self.base_url}{endpoint}"

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }

        try:
            response = requests.request(
                method=method,
                url=url,
                headers=headers,
                json=json_body,
                timeout=self.timeout
            )
        except requests.RequestException as error:
            logger.error(f"Airtable request failed: {error}")
            raise RuntimeError(f"Airtable request failed: {error}") from error

        if not 200 <= response.status_code < 300:
            logger.error(f"Airtable error ({response.status_code}): {response.text}")
            raise RuntimeError(
                f"Airtable API error: {response.status_code} - {response.text}"
            )

        if response.content:
            return response.json()
        return {}

    # ------------------------------------------------------------------
    # Public API methods
    # ------------------------------------------------------------------

    def build_fields(
        self,
        category: DocumentCategory,
        totals: WeighingTotals,
        image_url: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Map a weighing record onto Airtable field ids.

        Raises:
        - RuntimeError if any of the four field ids is missing
        """

        missing = [name for name, field_id in self.field_ids.items() if not field_id]
        if missing:
            raise RuntimeError(
                f"Airtable field configuration incomplete: missing {', '.join(missing)}"
            )

        fields: Dict[str, Any] = {
            self.field_ids["tipo_peso"]: category.label,
            self.field_ids["peso_bascula"]: totals.scale_weight,
            self.field_ids["peso_campo"]: totals.field_net_weight,
            self.field_ids["total_racimos"]: totals.bunch_count,
        }

        if image_url and self.image_field:
            fields[self.image_field] = [{"url": image_url}]

        return fields

    def create_weighing_record(
        self,
        category: DocumentCategory,
        totals: WeighingTotals,
        image_url: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Create one weighing record.

        Parameters:
        - category: document category (written as its label)
        - totals: values to store
        - image_url: optional public URL of the archived photo

        Returns:
        - Airtable response JSON (contains the new record "id")
        """

        if not self.base_id or not self.table_id:
            raise RuntimeError("AIRTABLE_BASE_ID and AIRTABLE_TABLE_ID must be configured")

        fields = self.build_fields(category, totals, image_url)

        logger.info(f"Creating Airtable record in {self.base_id}/{self.table_id}")

        result = self._request(
            method="POST",
            endpoint=f"/{self.base_id}/{self.table_id}",
            json_body={"fields": fields}
        )

        logger.info(f"Airtable record created: {result.get('id')}")

        return result

    def list_bases(self) -> Dict[str, Any]:
        """
        List the bases visible to the token.
        Used to check the connection and find the base id.
        """

        return self._request(method="GET", endpoint="/meta/bases")
