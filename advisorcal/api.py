"""HTTP repository for the advisor backend's ``/events`` endpoints."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from advisorcal.errors import CollaboratorFailure, NotFoundError
from advisorcal.models import Event

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 20  # seconds


class EventsApiClient:
    """``EventRepository`` backed by the REST API.

    Every call is a single request; failures are not retried. Any transport
    error or HTTP status >= 400 raises ``CollaboratorFailure``, except a 404
    on update/delete, which raises ``NotFoundError``.

    Example::

        with EventsApiClient("http://localhost:8000", token=token) as api:
            session = CalendarSession(api)
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    # ------------------------------------------------------------------
    # Repository interface
    # ------------------------------------------------------------------

    def list(self) -> list[Event]:
        resp = self._request("GET", "/events")
        events = [Event.from_dict(item) for item in resp.json()]
        logger.info("Fetched %d event(s) from %s", len(events), self._client.base_url)
        return events

    def create(self, event: Event) -> Event:
        """POST the new record. The backend assigns the id, so the returned
        event may carry a different id than *event*."""
        payload = event.to_dict()
        del payload["id"]
        resp = self._request("POST", "/events", json=payload)
        created = self._decode(resp, fallback=event)
        if created.id != event.id:
            logger.debug("Backend assigned id %s to new event %s", created.id, event.id)
        return created

    def update(self, event: Event) -> Event:
        resp = self._request("PUT", f"/events/{event.id}", json=event.to_dict(), target=event.id)
        return self._decode(resp, fallback=event)

    def delete(self, event_id: str) -> None:
        self._request("DELETE", f"/events/{event_id}", target=event_id)

    # ------------------------------------------------------------------
    # Auth & health
    # ------------------------------------------------------------------

    def login(self, email: str, password: str) -> str:
        """Exchange credentials for a JWT and use it on later requests."""
        resp = self._request("POST", "/auth/login", json={"email": email, "password": password})
        token = resp.json().get("token")
        if not token:
            raise CollaboratorFailure("login response did not include a token")
        self._client.headers["Authorization"] = f"Bearer {token}"
        return token

    def health(self) -> dict:
        return self._request("GET", "/health").json()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def __enter__(self) -> EventsApiClient:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------
    # HTTP helpers
    # ------------------------------------------------------------------

    def _request(self, method: str, url: str, *, target: Optional[str] = None, **kwargs) -> httpx.Response:
        try:
            logger.debug("%s %s", method, url)
            resp = self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise CollaboratorFailure(f"{method} {url} failed: {exc}") from exc

        if resp.status_code == 404 and target is not None:
            raise NotFoundError(target)
        if resp.status_code >= 400:
            reason = _error_message(resp)
            logger.warning("%s %s returned HTTP %d (%s)", method, url, resp.status_code, reason)
            raise CollaboratorFailure(f"{method} {url} returned HTTP {resp.status_code}: {reason}")
        return resp

    @staticmethod
    def _decode(resp: httpx.Response, fallback: Event) -> Event:
        """Use the server's copy of the record, and its id, when it sends one back."""
        if not resp.content:
            return fallback
        try:
            data = resp.json()
        except ValueError:
            return fallback
        if not isinstance(data, dict) or "date" not in data:
            return fallback
        if "_id" not in data:
            data.setdefault("id", fallback.id)
        return Event.from_dict(data)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} base_url={str(self._client.base_url)!r}>"


def _error_message(resp: httpx.Response) -> str:
    """Pull the backend's ``{"error": ...}`` message out of a failed response."""
    try:
        body = resp.json()
    except ValueError:
        return resp.reason_phrase
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return resp.reason_phrase
