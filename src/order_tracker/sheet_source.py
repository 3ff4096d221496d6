"""
Sheet Source
HTTP (and local file) access to the published order sheet and the pricing
documents. Blocking calls; the orchestrator runs them off the event loop.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import requests

from . import tracker_config as cfg

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, max-age=0",
    "Pragma": "no-cache",
}


class SourceError(ConnectionError):
    """A sheet or pricing document could not be fetched or decoded."""

    def __init__(self, message: str, error_code: str = "SOURCE_ERROR"):
        super().__init__(message)
        self.error_code = error_code


class SheetSource:
    """Fetches the order CSV and the pricing/promo documents."""

    def __init__(
        self,
        csv_url: Optional[str] = None,
        prices_source: Optional[str] = None,
        promo_source: Optional[str] = None,
        timeout: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.csv_url = csv_url or cfg.CSV_URL
        self.prices_source = prices_source or cfg.PRICES_SOURCE
        self.promo_source = promo_source if promo_source is not None else cfg.PROMO_SOURCE
        self.timeout = timeout or cfg.HTTP_TIMEOUT
        self.session = session or requests.Session()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def fetch_csv_text(self, force_refresh: bool = False) -> str:
        """GET the published CSV; a forced refresh bypasses HTTP caches."""
        headers = dict(NO_CACHE_HEADERS) if force_refresh else {}
        response = self._http_get(self.csv_url, headers=headers)
        response.encoding = "utf-8"
        return response.text.strip()

    def fetch_pricing(self) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        """Return (prices, promo) documents.

        Without a separate promo source the promo block embedded in the
        prices document is used.
        """
        prices = self.fetch_json(self.prices_source)
        if self.promo_source:
            promo = self.fetch_json(self.promo_source)
        else:
            promo = prices.get("promo") or {}
        return prices, promo

    def fetch_json(self, source: str) -> Dict[str, Any]:
        """Load a JSON object from an http(s) URL or a local path."""
        if _is_url(source):
            response = self._http_get(source)
            try:
                data = response.json()
            except ValueError as exc:
                raise SourceError(f"Invalid JSON from {source}: {exc}", "INVALID_JSON") from exc
        else:
            path = Path(source)
            try:
                with open(path, "r", encoding="utf-8") as fh:
                    data = json.load(fh)
            except FileNotFoundError as exc:
                raise SourceError(f"File not found: {source}", "FILE_NOT_FOUND") from exc
            except ValueError as exc:
                raise SourceError(f"Invalid JSON in {source}: {exc}", "INVALID_JSON") from exc
            except OSError as exc:
                raise SourceError(f"Cannot read {source}: {exc}", "FILE_READ_ERROR") from exc

        if not isinstance(data, dict):
            raise SourceError(f"Expected a JSON object from {source}", "INVALID_JSON")
        return data

    # ------------------------------------------------------------------
    # Internal HTTP
    # ------------------------------------------------------------------

    def _http_get(self, url: str, headers: Optional[Dict[str, str]] = None) -> requests.Response:
        """Low-level GET. Raises SourceError on any transport or HTTP failure."""
        try:
            response = self.session.get(url, headers=headers or {}, timeout=self.timeout)
        except requests.Timeout as exc:
            raise SourceError(f"Request timed out: {url}", "SOURCE_TIMEOUT") from exc
        except requests.RequestException as exc:
            raise SourceError(f"Cannot connect to {url}: {exc}", "SOURCE_UNREACHABLE") from exc

        if not response.ok:
            raise SourceError(
                f"Gagal memuat {url}: HTTP {response.status_code}",
                "SOURCE_HTTP_ERROR",
            )
        return response


def _is_url(source: str) -> bool:
    return str(source).lower().startswith(("http://", "https://"))
