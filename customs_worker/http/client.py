from collections.abc import Mapping
from types import TracebackType

import httpx

from customs_worker.config.settings import Settings
from customs_worker.http.exceptions import NetworkError


class CustomsHttpClient:
    """Thin GET-only wrapper over httpx for the customs portal and its PDFs."""

    def __init__(
        self,
        *,
        timeout_seconds: float = 20.0,
        user_agent: str = "",
        client: httpx.Client | None = None,
    ) -> None:
        headers = {"User-Agent": user_agent} if user_agent else {}
        self._client = client or httpx.Client(
            timeout=timeout_seconds,
            headers=headers,
            follow_redirects=True,
            trust_env=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "CustomsHttpClient":
        return cls(
            timeout_seconds=settings.http_timeout_seconds,
            user_agent=settings.http_user_agent,
        )

    def get_text(self, url: str, params: Mapping[str, str | int] | None = None) -> str:
        """GET ``url`` and return the decoded body.

        Raises:
            NetworkError: on transport failures and non-2xx responses.
        """
        return self._get(url, params).text

    def get_bytes(self, url: str) -> bytes:
        """GET ``url`` and return the raw body (used for PDF downloads)."""
        return self._get(url, None).content

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "CustomsHttpClient":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _get(self, url: str, params: Mapping[str, str | int] | None) -> httpx.Response:
        target = httpx.URL(url)
        if params:
            target = target.copy_merge_params(dict(params))
        try:
            response = self._client.get(target)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise NetworkError(f"GET {target} failed: {exc}") from exc
        return response
