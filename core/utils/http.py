import logging
from typing import Any, Optional
import requests
from core.config import get_settings
from core.errors import ExternalServiceError

logger = logging.getLogger(__name__)

class ServiceClient:
    """Base class for the third-party HTTP APIs the app calls into.

    Transport errors and non-2xx responses are logged with full detail and
    re-raised as ExternalServiceError carrying a generic message.
    """
    service_name = "external service"
    base_url = ""

    def __init__(self, session: Optional[requests.Session] = None, timeout: Optional[float] = None):
        self.http = session or requests.Session()
        self.timeout = timeout if timeout is not None else get_settings().http_timeout

    def _headers(self) -> dict:
        return {}

    def request(self, method: str, path: str, expected: tuple = (200, 201), **kwargs) -> requests.Response:
        url = path if path.startswith("http") else f"{self.base_url}{path}"
        headers = {**self._headers(), **kwargs.pop("headers", {})}
        try:
            response = self.http.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(f"{self.service_name} request {method} {url} failed: {e}")
            raise ExternalServiceError(self.service_name, f"{self.service_name} is unavailable")

        if response.status_code not in expected:
            logger.error(
                f"{self.service_name} request {method} {url} returned "
                f"{response.status_code}: {response.text[:500]}"
            )
            raise ExternalServiceError(self.service_name, f"{self.service_name} request failed")
        return response

    def request_json(self, method: str, path: str, **kwargs) -> Any:
        response = self.request(method, path, **kwargs)
        try:
            return response.json()
        except ValueError:
            logger.error(f"{self.service_name} returned a non-JSON body for {path}")
            raise ExternalServiceError(self.service_name, f"{self.service_name} returned an invalid response")
