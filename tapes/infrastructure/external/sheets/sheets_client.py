"""
Cliente mínimo de Google Sheets API v4 (sin SDKs externos).

Solo lee los valores de una hoja (tab) de la planilla de inventario:

    GET https://sheets.googleapis.com/v4/spreadsheets/{id}/values/{sheet}

Autenticado con API key (header X-goog-api-key). No reintenta: un error de
red o de la API aborta la corrida, y la recuperacion es volver a correr.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional

import requests
from loguru import logger


@dataclass(frozen=True)
class SheetsCredentials:
    api_key: str
    spreadsheet_id: str


class SheetsApiError(RuntimeError):
    """Error de integración con Google Sheets."""


def _is_json(resp: requests.Response) -> bool:
    return resp.headers.get("content-type", "").startswith("application/json")


def _describe_error(resp: requests.Response) -> str:
    """
    Usa el payload de error de Google ({"error": {code, status, message}})
    si viene como JSON; si no, solo el status HTTP.
    """
    if _is_json(resp):
        try:
            data = resp.json().get("error") or {}
        except ValueError:
            data = None
        if data:
            return f"got error {data.get('code')} ({data.get('status')}): {data.get('message')}"
    return f"got status {resp.status_code} from Sheets API call"


class SheetsClient:
    """
    Cliente HTTP de Google Sheets. Implementa InventorySource.
    """

    def __init__(
        self,
        credentials: SheetsCredentials,
        *,
        sheet_name: str = "Tapes",
        session: Optional[requests.Session] = None,
        base_url: str = "https://sheets.googleapis.com/v4/spreadsheets",
        timeout_s: int = 30,
    ) -> None:
        self._creds = credentials
        self._sheet_name = sheet_name
        self._base_url = base_url.rstrip("/")
        self._timeout_s = timeout_s
        self._session = session or requests.Session()

    @property
    def values_url(self) -> str:
        return f"{self._base_url}/{self._creds.spreadsheet_id}/values/{self._sheet_name}"

    def get_values(self) -> List[List[str]]:
        """
        Retorna la grilla completa de la hoja. Las filas vienen recortadas
        (sin celdas vacias al final), tal cual las entrega la API.

        Raises:
            SheetsApiError: status no-2xx, respuesta no-JSON o payload invalido.
            requests.RequestException: error de red.
        """
        payload = self._request_json("GET", self.values_url)
        values = payload.get("values") or []
        if not isinstance(values, list):
            raise SheetsApiError("failed to parse Sheets API response: 'values' is not a list")
        return [[str(cell) for cell in row] for row in values]

    def _request_json(self, method: str, url: str) -> dict[str, Any]:
        headers = {"X-goog-api-key": self._creds.api_key}

        logger.debug(f"> {method} {url}")
        resp = self._session.request(
            method=method,
            url=url,
            headers=headers,
            timeout=self._timeout_s,
        )
        logger.debug(f"< {resp.status_code}")

        if not 200 <= resp.status_code < 300:
            raise SheetsApiError(_describe_error(resp))

        if not _is_json(resp):
            raise SheetsApiError(
                "expected a response with content-type 'application/json'; "
                f"got '{resp.headers.get('content-type', '')}'"
            )
        try:
            payload = resp.json()
        except ValueError as e:
            raise SheetsApiError(f"failed to parse Sheets API response: {e}") from e
        if not isinstance(payload, dict):
            raise SheetsApiError("failed to parse Sheets API response: expected an object")
        return payload
