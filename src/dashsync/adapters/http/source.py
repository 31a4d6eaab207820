"""httpx-backed item source for JSON bridge endpoints."""

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any

import httpx

logger = logging.getLogger(__name__)

ItemTransform = Callable[[Any], Any]


class HttpItemSource:
    """Item source reading keys and items from two JSON endpoints.

    ``GET {keys_path}`` must answer with an object whose ``keys_field``
    lists the keys, either as plain strings or as objects carrying the
    key under ``key_attr``. ``GET {items_path}?{key_param}=<key>``
    must answer with an object whose ``items_field`` lists the items.

    Non-2xx responses raise ``httpx.HTTPStatusError``; timeouts are
    whatever the client is configured with. The client is closed by
    ``aclose`` only if this source created it.
    """

    def __init__(
        self,
        base_url: str,
        keys_path: str,
        items_path: str,
        *,
        keys_field: str = "keys",
        key_attr: str | None = None,
        items_field: str = "items",
        key_param: str = "key",
        params: Mapping[str, str] | None = None,
        transform: ItemTransform | None = None,
        token: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the HTTP item source.

        Args:
            base_url: Base URL of the bridge service.
            keys_path: Path listing the keys.
            items_path: Path listing one key's items.
            keys_field: Response field holding the key list.
            key_attr: Attribute holding the key when keys are objects.
            items_field: Response field holding the item list.
            key_param: Query parameter carrying the key.
            params: Extra query parameters for every items request.
            transform: Optional function applied to every item.
            token: Optional bearer token.
            client: Optional client to reuse. Created if not provided.
            timeout: Timeout in seconds for a created client.
        """
        self._keys_path = keys_path
        self._items_path = items_path
        self._keys_field = keys_field
        self._key_attr = key_attr
        self._items_field = items_field
        self._key_param = key_param
        self._params = dict(params or {})
        self._transform = transform

        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._base_url = base_url.rstrip("/")
        self._headers = headers

    async def list_keys(self) -> list[str]:
        """List the keys advertised by the bridge.

        Returns:
            The keys, in response order.

        Raises:
            httpx.HTTPError: If the request failed.
        """
        data = await self._get_json(self._keys_path)
        keys: list[str] = []
        for entry in data.get(self._keys_field) or []:
            if isinstance(entry, Mapping):
                if self._key_attr is None or self._key_attr not in entry:
                    raise ValueError(
                        f"Key object missing attribute {self._key_attr!r}"
                    )
                keys.append(str(entry[self._key_attr]))
            else:
                keys.append(str(entry))
        return keys

    async def fetch_items(self, key: str) -> list[Any]:
        """Fetch the items for one key.

        Args:
            key: The partition key.

        Returns:
            The items, transformed if a transform is configured.

        Raises:
            httpx.HTTPError: If the request failed.
        """
        params = {self._key_param: key, **self._params}
        data = await self._get_json(self._items_path, params=params)
        items: Sequence[Any] = data.get(self._items_field) or []
        if self._transform is None:
            return list(items)
        return [self._transform(item) for item in items]

    async def aclose(self) -> None:
        """Close the HTTP client if this source created it."""
        if self._owns_client:
            await self._client.aclose()

    async def _get_json(
        self,
        path: str,
        params: Mapping[str, str] | None = None,
    ) -> Mapping[str, Any]:
        response = await self._client.get(
            f"{self._base_url}{path}",
            params=params,
            headers=self._headers,
        )
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Bridge request %s failed with status %d",
                path,
                e.response.status_code,
            )
            raise
        data = response.json()
        if not isinstance(data, Mapping):
            raise ValueError(f"Expected a JSON object from {path}")
        return data


def mark_read_from_labels(thread: Any) -> Any:
    """Derive a thread's ``read`` flag from its labels.

    A thread is unread exactly when it carries the ``UNREAD`` label.
    Non-mapping items are returned unchanged.
    """
    if not isinstance(thread, Mapping):
        return thread
    labels = thread.get("labels") or []
    return {**thread, "read": "UNREAD" not in labels}


def email_bridge_source(
    base_url: str,
    token: str | None = None,
    client: httpx.AsyncClient | None = None,
    query: str = "newer_than:14d",
    max_results: int = 50,
) -> HttpItemSource:
    """Build a source for the e-mail bridge.

    Accounts come from ``/api/email/accounts`` keyed by their address;
    threads come from ``/api/email/messages``.

    Args:
        base_url: Base URL of the bridge service.
        token: Optional bearer token.
        client: Optional client to reuse.
        query: Mail search query sent with every thread request.
        max_results: Maximum threads per account.

    Returns:
        A configured HttpItemSource.
    """
    return HttpItemSource(
        base_url,
        keys_path="/api/email/accounts",
        items_path="/api/email/messages",
        keys_field="accounts",
        key_attr="email",
        items_field="emails",
        key_param="account",
        params={"query": query, "max": str(max_results)},
        transform=mark_read_from_labels,
        token=token,
        client=client,
    )
