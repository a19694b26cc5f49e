# =============================================================================
# studio_core/offline/remote_gateway.py
# Supabase REST client with tagged results
# =============================================================================
"""
RemoteGateway - issues CRUD-shaped requests against the PostgREST
endpoint at {base_url}/rest/v1/ and never raises for remote trouble.

Every call returns a RemoteResult. A failed result carries a
FailureKind so callers can tell a missing credential from an outage:

    result = gateway.list_rows("posts", order="created_at.desc")
    if result:
        rows = result.data
    elif result.failure is FailureKind.CREDENTIAL_ABSENT:
        ...  # local-only deployment
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

import requests

from studio_core.errors import RemoteSyncError, StudioError
from studio_core.logging import get_logger

logger = get_logger(__name__)


class FailureKind(Enum):
    """Why a remote call did not produce data."""
    CREDENTIAL_ABSENT = "credential_absent"
    TRANSPORT = "transport"
    HTTP_STATUS = "http_status"
    DESERIALIZATION = "deserialization"


@dataclass
class RemoteResult:
    """
    Standard result container for remote calls.

    Truthy on success, falsy on failure.
    """
    success: bool
    data: Optional[Any] = None
    failure: Optional[FailureKind] = None
    error: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    def __bool__(self) -> bool:
        return self.success

    @classmethod
    def ok(cls, data: Any = None, metadata: Dict[str, Any] = None) -> RemoteResult:
        """Create a successful result"""
        return cls(success=True, data=data, metadata=metadata)

    @classmethod
    def fail(
        cls,
        failure: FailureKind,
        error: str,
        metadata: Dict[str, Any] = None,
    ) -> RemoteResult:
        """Create a failed result"""
        return cls(success=False, failure=failure, error=error, metadata=metadata)

    @classmethod
    def from_exception(cls, e: Exception, failure: FailureKind) -> RemoteResult:
        """Create a failed result from an exception"""
        if isinstance(e, StudioError):
            return cls.fail(failure, e.message, metadata=e.details)
        return cls.fail(failure, str(e))


class RemoteGateway:
    """
    Stateless HTTP client for the remote relational store.

    Usage:
        gateway = RemoteGateway("https://xyz.supabase.co", api_key)
        result = gateway.insert_row("posts", post.to_dict())
    """

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def is_configured(self) -> bool:
        """True when a credential is available."""
        return bool(self.api_key)

    def _headers(self, method: str) -> Dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        if method == "POST":
            headers["Prefer"] = "return=representation"
        return headers

    def _failure(
        self,
        failure: FailureKind,
        message: str,
        path: str,
        method: str,
        status_code: Optional[int] = None,
    ) -> RemoteResult:
        error = RemoteSyncError(message, resource=path, method=method, status_code=status_code)
        return RemoteResult.from_exception(error, failure)

    def request(self, path: str, method: str = "GET", body: Optional[Any] = None) -> RemoteResult:
        """
        Send one request to {base_url}/rest/v1/{path}.

        Args:
            path: Resource path, including any PostgREST query string
            method: HTTP method (GET, POST, DELETE, ...)
            body: JSON-serializable request body

        Returns:
            RemoteResult with the parsed JSON body on success; an empty
            body succeeds with data=None
        """
        method = method.upper()
        if not self.is_configured:
            return self._failure(FailureKind.CREDENTIAL_ABSENT, "No API key configured", path, method)

        url = f"{self.base_url}/rest/v1/{path}"
        try:
            response = self.session.request(
                method=method,
                url=url,
                headers=self._headers(method),
                json=body,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.debug(f"{method} {path} failed: {e}")
            return self._failure(FailureKind.TRANSPORT, f"Request failed: {e}", path, method)

        if not response.ok:
            return self._failure(
                FailureKind.HTTP_STATUS,
                f"Remote returned HTTP {response.status_code}",
                path,
                method,
                status_code=response.status_code,
            )

        if not response.content:
            return RemoteResult.ok(None, metadata={"status_code": response.status_code})

        try:
            data = response.json()
        except ValueError as e:
            return self._failure(FailureKind.DESERIALIZATION, f"Malformed JSON body: {e}", path, method)

        return RemoteResult.ok(data, metadata={"status_code": response.status_code})

    # =========================================================================
    # POSTGREST HELPERS
    # =========================================================================

    def list_rows(self, resource: str, order: Optional[str] = None) -> RemoteResult:
        """GET all rows of a resource, optionally ordered server-side."""
        path = f"{resource}?select=*"
        if order:
            path += f"&order={order}"
        return self.request(path)

    def insert_row(self, resource: str, row: Dict[str, Any]) -> RemoteResult:
        """
        POST a row; the created representation must be echoed back.

        A 2xx reply without a body (or with a JSON null) is a
        DESERIALIZATION failure, since nothing confirms the insert.
        """
        result = self.request(resource, "POST", row)
        if result and result.data is None:
            status_code = (result.metadata or {}).get("status_code")
            return self._failure(
                FailureKind.DESERIALIZATION,
                "Insert returned no representation",
                resource,
                "POST",
                status_code=status_code,
            )
        return result

    def delete_row(self, resource: str, record_id: str) -> RemoteResult:
        """DELETE the row whose id equals record_id."""
        return self.request(f"{resource}?id=eq.{record_id}", "DELETE")

    def close(self) -> None:
        self.session.close()


def rows_or_none(result: RemoteResult) -> Optional[List[Dict[str, Any]]]:
    """The result's rows when it succeeded with a JSON array, else None."""
    if result and isinstance(result.data, list):
        return result.data
    return None
