from __future__ import annotations

"""
HTTP Host Client.

Talks to a dashboard bridge exposing sources and filters over a small
JSON/REST surface:

    GET    {base}/sources                          -> {"name": ["field", ...]}
    GET    {base}/sources/{name}/rows              -> [{"field": "value"}, ...]
    PUT    {base}/sources/{name}/filters/{field}   <- {"values": [...]}
    DELETE {base}/sources/{name}/filters/{field}

Every transport or protocol failure surfaces as a retryable HostError.
"""

import logging
from typing import Any, Dict, List, Sequence
from urllib.parse import quote

import requests

from hierfilter.domain.errors import HostError
from hierfilter.infra.hosts.base import DEFAULT_TIMEOUT, USER_AGENT

logger = logging.getLogger(__name__)


class HttpHost:
    """
    HostBridge implementation over HTTP using requests.
    """

    def __init__(self, base_url: str, timeout: float = DEFAULT_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}

    # -------------------------------------------------------------------------
    # HOST BRIDGE
    # -------------------------------------------------------------------------

    def list_sources(self) -> Dict[str, List[str]]:
        data = self._get_json(f"{self.base_url}/sources")
        if not isinstance(data, dict):
            raise HostError("Malformed schema payload (root is not an object).")
        return {str(name): [str(f) for f in fields] for name, fields in data.items()}

    def fetch_rows(self, source_name: str) -> List[Dict[str, Any]]:
        data = self._get_json(f"{self._source_url(source_name)}/rows")
        if not isinstance(data, list) or not all(isinstance(r, dict) for r in data):
            raise HostError(f"Malformed rows payload for source '{source_name}'.")
        logger.info(f"Network: Received {len(data)} row(s) for '{source_name}'.")
        return data

    def apply_filter(self, source_name: str, field_name: str, values: Sequence[str]) -> None:
        url = self._filter_url(source_name, field_name)
        try:
            response = requests.put(
                url, json={"values": list(values)}, headers=self._headers, timeout=self.timeout
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise HostError(f"Filter update failed for '{field_name}': {e}") from e

    def clear_filter(self, source_name: str, field_name: str) -> None:
        url = self._filter_url(source_name, field_name)
        try:
            response = requests.delete(url, headers=self._headers, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise HostError(f"Filter clear failed for '{field_name}': {e}") from e

    # -------------------------------------------------------------------------
    # PRIVATE HELPERS
    # -------------------------------------------------------------------------

    def _source_url(self, source_name: str) -> str:
        return f"{self.base_url}/sources/{quote(source_name, safe='')}"

    def _filter_url(self, source_name: str, field_name: str) -> str:
        return f"{self._source_url(source_name)}/filters/{quote(field_name, safe='')}"

    def _get_json(self, url: str) -> Any:
        logger.debug(f"Network: GET {url}")
        try:
            response = requests.get(url, headers=self._headers, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.Timeout as e:
            raise HostError(f"Host timed out after {self.timeout}s: {url}") from e
        except requests.exceptions.RequestException as e:
            raise HostError(f"Host communication error: {e}") from e
        except ValueError as e:
            raise HostError(f"Host returned invalid JSON: {e}") from e
