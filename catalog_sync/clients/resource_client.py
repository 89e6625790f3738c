# catalog_sync/clients/resource_client.py

"""Async REST client for the ``products`` and ``comments`` collections."""

import json
import logging
from types import TracebackType
from typing import Any

from curl_cffi import requests as curl_requests

from catalog_sync.config.settings import Settings
from catalog_sync.models.comment import Comment
from catalog_sync.models.errors import NetworkError, NotFoundError
from catalog_sync.models.product import Product

logger = logging.getLogger("catalog_sync.client")


class ResourceClient:
    """Translate catalog operations into single HTTP requests.

    No retries and no caching: each call is one request and either
    returns decoded domain values or raises ``NetworkError`` /
    ``NotFoundError``.
    """

    def __init__(
        self,
        base_url: str | None = None,
        session: Any | None = None,
    ) -> None:
        self.settings = Settings()
        self.base_url = (
            base_url or self.settings.API_BASE_URL
        ).rstrip("/")
        self._owns_session = session is None
        self.session: Any = session or curl_requests.AsyncSession()
        self._request_timeout: float = self.settings.REQUEST_TIMEOUT

    async def __aenter__(self) -> "ResourceClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying session if this client created it."""
        if self._owns_session:
            await self.session.close()

    # ── Transport ────────────────────────────────────────

    async def _request(
        self,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
    ) -> Any:
        """Send one request and return the decoded JSON body (or None)."""
        url = f"{self.base_url}{path}"
        try:
            resp = await self.session.request(
                method,
                url,
                json=payload,
                params=params,
                headers=self.settings.DEFAULT_HEADERS,
                timeout=self._request_timeout,
            )
        except curl_requests.RequestsError as exc:
            logger.warning(
                "%s %s transport failure: %s",
                method,
                url,
                exc,
                exc_info=True,
            )
            raise NetworkError(
                f"{method} {path} failed: {exc}"
            ) from exc

        status: int = resp.status_code
        if status == 404:
            logger.info("%s %s -> 404", method, url)
            raise NotFoundError(path)
        if not 200 <= status < 300:
            logger.warning("%s %s -> HTTP %d", method, url, status)
            raise NetworkError(
                f"{method} {path} returned HTTP {status}",
                status_code=status,
            )

        logger.debug("%s %s -> HTTP %d", method, url, status)
        if not resp.content:
            return None
        try:
            return json.loads(resp.content)
        except ValueError as exc:
            raise NetworkError(
                f"{method} {path} returned invalid JSON",
                status_code=status,
            ) from exc

    @staticmethod
    def _decode(
        decoder: Any, data: Any, path: str,
    ) -> Any:
        """Apply a ``from_dict`` decoder, mapping shape errors."""
        if not isinstance(data, dict):
            raise NetworkError(
                f"Expected a JSON object from {path}, "
                f"got {type(data).__name__}"
            )
        try:
            return decoder(data)
        except (KeyError, TypeError, ValueError) as exc:
            raise NetworkError(
                f"Unexpected payload from {path}: {exc}"
            ) from exc

    def _decode_list(
        self, decoder: Any, data: Any, path: str,
    ) -> list[Any]:
        if not isinstance(data, list):
            raise NetworkError(
                f"Expected a JSON array from {path}"
            )
        return [self._decode(decoder, item, path) for item in data]

    async def probe(self, path: str) -> None:
        """GET a collection root, discarding the body.

        Raises the same errors as any other call; used by health checks.
        """
        await self._request("GET", path)

    def _product_path(self, product_id: str) -> str:
        return f"{self.settings.PRODUCTS_PATH}/{product_id}"

    def _comment_path(self, comment_id: str) -> str:
        return f"{self.settings.COMMENTS_PATH}/{comment_id}"

    # ── Products ─────────────────────────────────────────

    async def list_products(self) -> list[Product]:
        """GET every product."""
        path = self.settings.PRODUCTS_PATH
        data = await self._request("GET", path)
        products: list[Product] = self._decode_list(
            Product.from_dict, data, path
        )
        return products

    async def get_product(self, product_id: str) -> Product:
        """GET one product by id."""
        path = self._product_path(product_id)
        data = await self._request("GET", path)
        product: Product = self._decode(Product.from_dict, data, path)
        return product

    async def create_product(self, product: Product) -> Product:
        """POST a product and return the stored representation."""
        path = self.settings.PRODUCTS_PATH
        data = await self._request("POST", path, product.to_dict())
        stored: Product = self._decode(Product.from_dict, data, path)
        return stored

    async def replace_product(self, product: Product) -> Product:
        """PUT the full product resource (replace, not patch)."""
        path = self._product_path(product.id)
        data = await self._request("PUT", path, product.to_dict())
        stored: Product = self._decode(Product.from_dict, data, path)
        return stored

    async def delete_product(self, product_id: str) -> None:
        """DELETE a product; raises ``NotFoundError`` if already gone."""
        await self._request("DELETE", self._product_path(product_id))

    # ── Comments ─────────────────────────────────────────

    async def list_comments(self, product_id: str) -> list[Comment]:
        """GET the comments whose ``productId`` matches."""
        path = self.settings.COMMENTS_PATH
        data = await self._request(
            "GET", path, params={"productId": product_id}
        )
        comments: list[Comment] = self._decode_list(
            Comment.from_dict, data, path
        )
        return comments

    async def get_comment(self, comment_id: str) -> Comment:
        """GET one comment by id."""
        path = self._comment_path(comment_id)
        data = await self._request("GET", path)
        comment: Comment = self._decode(Comment.from_dict, data, path)
        return comment

    async def create_comment(self, comment: Comment) -> Comment:
        """POST a comment and return the stored representation."""
        path = self.settings.COMMENTS_PATH
        data = await self._request("POST", path, comment.to_dict())
        stored: Comment = self._decode(Comment.from_dict, data, path)
        return stored

    async def delete_comment(self, comment_id: str) -> None:
        """DELETE a comment; raises ``NotFoundError`` if already gone."""
        await self._request("DELETE", self._comment_path(comment_id))
