"""
Splitser API client
===================

Posts a prepared expense payload to a Splitser list. One call per request,
no retries and no timeout beyond what requests/urllib3 apply by default.
"""

import logging
from typing import Any, Dict, Mapping, Optional

import requests

from errors import ExpenseValidationError, RemoteServiceError

logger = logging.getLogger(__name__)

API_VERSION = "11"


def parse_cookies(cookies: Any) -> Dict[str, str]:
    """Normalize session cookies given as a mapping or a 'k=v; k2=v2' string"""
    if cookies is None:
        return {}
    if isinstance(cookies, Mapping):
        return {str(k): str(v) for k, v in cookies.items()}
    if isinstance(cookies, str):
        if not cookies.strip():
            return {}
        parsed = {}
        for pair in cookies.split(";"):
            name, sep, value = pair.strip().partition("=")
            name = name.strip()
            if name and sep:
                parsed[name] = value.strip()
        if not parsed:
            raise ExpenseValidationError(ExpenseValidationError.MALFORMED_COOKIES, "Invalid cookies format")
        return parsed
    raise ExpenseValidationError(ExpenseValidationError.MALFORMED_COOKIES, "Invalid cookies format")


class SplitserClient:
    def __init__(
        self,
        list_id: str,
        base_url: str = "https://app.splitser.com",
        cookies: Any = None,
        session: Optional[requests.Session] = None,
    ):
        self.expenses_url = f"{base_url.rstrip('/')}/api/lists/{list_id}/expenses"
        self.cookies = parse_cookies(cookies)
        self.session = session

    @property
    def headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Accept-Version": API_VERSION,
            "Content-Type": "application/json",
        }
        if self.cookies:
            headers["Cookie"] = "; ".join(f"{k}={v}" for k, v in self.cookies.items())
        return headers

    def add_expense(self, payload: Dict[str, Any]) -> Any:
        """
        POST the payload and return the decoded JSON response.

        Raises:
            RemoteServiceError: transport failure, non-2xx status or non-JSON body
        """
        post = self.session.post if self.session is not None else requests.post
        try:
            response = post(self.expenses_url, json=payload, headers=self.headers)
        except requests.RequestException as e:
            logger.error(f"Splitser request failed: {e}")
            raise RemoteServiceError(f"Splitser request failed: {e}") from e

        if not 200 <= response.status_code < 300:
            logger.error(f"Splitser API error: {response.status_code} - {response.text}")
            raise RemoteServiceError(
                f"Splitser API returned {response.status_code}",
                status_code=response.status_code,
                response_body=response.text,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise RemoteServiceError(
                "Splitser API returned a non-JSON body",
                status_code=response.status_code,
                response_body=response.text,
            ) from e

        logger.info(f"Expense created in Splitser ({response.status_code})")
        return data
