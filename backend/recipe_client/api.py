import os
import logging
import requests
from dotenv import find_dotenv, load_dotenv

from recipe_client.errors import TransportError

log = logging.getLogger(__name__)

# .env is looked up from the working directory
load_dotenv(find_dotenv(usecwd=True))

DEFAULT_BASE_URL = "http://localhost:8080"


def _server_message(resp):
    try:
        body = resp.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if isinstance(error, dict) and error.get("message"):
        return error["message"]
    return body.get("message") or body.get("friendlyMessage")


class ApiClient:
    """Shared HTTP client for the recipe backend; every failure surfaces as TransportError."""

    def __init__(self, base_url: str | None = None, timeout: float = 30, session: requests.Session | None = None):
        self.base_url = (base_url or os.getenv("RECIPE_API_URL") or DEFAULT_BASE_URL).rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def request(self, method: str, path: str, **kwargs):
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            log.warning("%s %s failed: %s", method, url, e)
            raise TransportError() from e

        if not resp.ok:
            raise TransportError(resp.status_code, _server_message(resp))
        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()

    def get(self, path, **kwargs): return self.request("GET", path, **kwargs)
    def post(self, path, **kwargs): return self.request("POST", path, **kwargs)
    def put(self, path, **kwargs): return self.request("PUT", path, **kwargs)
    def delete(self, path, **kwargs): return self.request("DELETE", path, **kwargs)

    def close(self):
        self.session.close()
