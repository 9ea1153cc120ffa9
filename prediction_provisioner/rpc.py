import itertools
import logging
from typing import Any, Dict, List, Optional

import requests

from prediction_provisioner.errors import RpcError

logger = logging.getLogger(__name__)


class RpcClient:
    """Minimal JSON-RPC 2.0 client for an Ethereum-compatible node."""

    def __init__(self, url: str, api_key: Optional[str] = None, timeout: float = 20,
                 session: Optional[requests.Session] = None):
        self.url = url
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()
        self._ids = itertools.count(1)

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def call(self, method: str, params: Optional[List[Any]] = None) -> Any:
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params or []}
        logger.debug("rpc -> %s %s", method, payload["params"])
        try:
            r = self.session.post(self.url, json=payload, headers=self._headers(), timeout=self.timeout)
            r.raise_for_status()
            body = r.json()
        except requests.RequestException as e:
            raise RpcError(f"{method} request to {self.url} failed: {e}") from e
        except ValueError as e:
            raise RpcError(f"{method} returned a non-JSON response") from e

        if not isinstance(body, dict):
            raise RpcError(f"{method} returned an unexpected payload: {body!r}")
        if "error" in body and body["error"] is not None:
            err = body["error"]
            if isinstance(err, dict):
                message = err.get("message") or "unknown error"
                data = err.get("data")
                if isinstance(data, str) and data:
                    message = f"{message} ({data})"
                raise RpcError(message, code=err.get("code"))
            raise RpcError(str(err))
        if "result" not in body:
            raise RpcError(f"{method} response has no result")
        logger.debug("rpc <- %s %s", method, body["result"])
        return body["result"]
