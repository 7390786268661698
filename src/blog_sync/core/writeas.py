"""Client for the Write.as-compatible blog API."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import requests
from pydantic import ValidationError

from ..errors import DecodeError, NotFoundError
from ..sync.models import RemotePost
from .http import DEFAULT_TIMEOUT, create_session, send, unwrap_envelope

logger = logging.getLogger(__name__)

DEFAULT_WRITEAS_ENDPOINT = "https://write.as/api"


@dataclass
class PostParams:
    """Fields sent when creating or updating a post."""

    title: str
    body: str
    slug: str | None = None
    created: datetime | None = None
    updated: datetime | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"title": self.title, "body": self.body}
        if self.slug is not None:
            payload["slug"] = self.slug
        if self.created is not None:
            payload["created"] = format_timestamp(self.created)
        if self.updated is not None:
            payload["updated"] = format_timestamp(self.updated)
        return payload


def format_timestamp(value: datetime) -> str:
    """Format a datetime the way the API expects (UTC, second precision)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO 8601 timestamp from the API into an aware datetime."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_post(data: Any) -> RemotePost:
    """Convert one post object from the API into a ``RemotePost``.

    Raises:
        DecodeError: If required fields are missing or malformed.
    """
    if not isinstance(data, dict):
        raise DecodeError(f"Expected a post object, got {type(data).__name__}")
    try:
        return RemotePost(
            id=str(data["id"]),
            slug=data.get("slug") or "",
            title=data.get("title") or "",
            body=data.get("body") or "",
            created=parse_timestamp(data["created"]),
            updated=parse_timestamp(data.get("updated") or data["created"]),
        )
    except (KeyError, TypeError, ValueError, ValidationError) as exc:
        raise DecodeError(f"Malformed post in response: {exc}") from exc


class WriteAsClient:
    def __init__(
        self,
        endpoint: str = DEFAULT_WRITEAS_ENDPOINT,
        token: str | None = None,
        timeout: tuple[float, float] = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ):
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout
        self.session = session or create_session()
        self.token: str | None = None
        if token:
            self.set_token(token)

    def set_token(self, token: str) -> None:
        """Use ``token`` for all subsequent authenticated calls."""
        self.token = token
        self.session.headers["Authorization"] = f"Token {token}"

    def login(self, alias: str, password: str) -> str:
        """
        Log in with user credentials and keep the returned access token.

        Returns:
            The access token

        Raises:
            TransportError: If the credentials are rejected
            DecodeError: If the response carries no token
        """
        response = send(
            self.session,
            "POST",
            f"{self.endpoint}/auth/login",
            json={"alias": alias, "pass": password},
            timeout=self.timeout,
        )
        data = unwrap_envelope(response)
        token = data.get("access_token") if isinstance(data, dict) else None
        if not token:
            raise DecodeError("Login response did not contain an access token")
        self.set_token(token)
        logger.debug("Logged in to %s as %s", self.endpoint, alias)
        return token

    def list_posts(self, collection: str, page: int) -> list[RemotePost]:
        """
        Fetch one page of a collection's posts.

        Args:
            collection: Collection alias
            page: 1-based page number; an empty list marks the end

        Raises:
            NotFoundError: If the collection does not exist
            TransportError: On network or HTTP errors
            DecodeError: If the response is malformed
        """
        response = send(
            self.session,
            "GET",
            f"{self.endpoint}/collections/{collection}/posts",
            params={"page": page},
            ok=(200, 404),
            timeout=self.timeout,
        )
        if response.status_code == 404:
            raise NotFoundError(f"Collection '{collection}'")

        data = unwrap_envelope(response)
        if not isinstance(data, dict):
            raise DecodeError("Collection response is not an object")
        posts = data.get("posts") or []
        if not isinstance(posts, list):
            raise DecodeError("Collection 'posts' is not a list")
        return [parse_post(p) for p in posts]

    def create_post(self, collection: str, params: PostParams) -> RemotePost:
        """Create a post in ``collection``."""
        if params.slug is None:
            raise ValueError("A slug is required to create a post")
        response = send(
            self.session,
            "POST",
            f"{self.endpoint}/collections/{collection}/posts",
            json=params.to_payload(),
            ok=(200, 201),
            timeout=self.timeout,
        )
        return parse_post(unwrap_envelope(response))

    def update_post(self, post_id: str, params: PostParams) -> RemotePost:
        """Update an existing post by its ID."""
        response = send(
            self.session,
            "POST",
            f"{self.endpoint}/posts/{post_id}",
            json=params.to_payload(),
            ok=(200,),
            timeout=self.timeout,
        )
        return parse_post(unwrap_envelope(response))
