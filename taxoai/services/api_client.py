"""
HTTP client for the TaxoAI classification API
"""

from typing import Any, Dict, List, Optional, Type, TypeVar, Union
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from taxoai.core.config import settings
from taxoai.core.exceptions import (
    ApiError,
    NetworkError,
    PaymentRequiredError,
    RateLimitedError,
    ServerError,
    UnauthorizedError,
)
from taxoai.core.logging import log
from taxoai.schemas.analysis import AnalysisPayload, AnalysisResult
from taxoai.schemas.batch import BatchJob, BatchSubmitResponse
from taxoai.schemas.taxonomy import TaxonomySearchResult
from taxoai.schemas.usage import UsageSnapshot


ResponseModel = TypeVar("ResponseModel", bound=BaseModel)

SERVER_ERROR_CODES = (500, 502, 503)


class TaxoAIClient:
    """
    Thin async wrapper over the remote REST API.

    Every call is a single attempt with a fixed timeout; failures are raised
    as TaxoAIError subclasses. Use as an async context manager, or call
    aclose() when the client owns its httpx.AsyncClient.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = (settings.api_key if api_key is None else api_key).strip()
        self.api_url = (api_url or settings.api_url).rstrip("/")
        self.timeout = timeout or settings.request_timeout

        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=self.timeout, transport=transport)

    async def __aenter__(self) -> "TaxoAIClient":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()

    async def aclose(self):
        if self._owns_client:
            await self.client.aclose()

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "X-API-Key": self.api_key,
        }

    async def analyze_product(self, payload: Union[AnalysisPayload, Dict[str, Any]]) -> AnalysisResult:
        """POST /v1/products/analyze"""
        body = payload.to_request() if isinstance(payload, AnalysisPayload) else payload
        data = await self._request("POST", "/v1/products/analyze", "analyze_product", json=body)
        return self._decode(AnalysisResult, data, "analyze_product").keep_body(data)

    async def get_usage(self) -> UsageSnapshot:
        """GET /v1/usage"""
        data = await self._request("GET", "/v1/usage", "get_usage")
        return self._decode(UsageSnapshot, data, "get_usage")

    async def search_taxonomies(self, query: str, limit: int = 10) -> TaxonomySearchResult:
        """GET /v1/taxonomies/search"""
        data = await self._request(
            "GET", "/v1/taxonomies/search", "search_taxonomies", params={"q": query, "limit": int(limit)}
        )
        return self._decode(TaxonomySearchResult, data, "search_taxonomies")

    async def submit_batch(self, products: List[Union[AnalysisPayload, Dict[str, Any]]]) -> BatchSubmitResponse:
        """POST /v1/products/batch"""
        body = {
            "products": [p.to_request() if isinstance(p, AnalysisPayload) else p for p in products],
        }
        data = await self._request("POST", "/v1/products/batch", "submit_batch", json=body)
        return self._decode(BatchSubmitResponse, data, "submit_batch")

    async def get_job(self, job_id: str) -> BatchJob:
        """GET /v1/jobs/{job_id}"""
        path = f"/v1/jobs/{quote(str(job_id), safe='')}"
        data = await self._request("GET", path, "get_job")
        return self._decode(BatchJob, data, "get_job")

    async def _request(
        self,
        method: str,
        path: str,
        context: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
    ) -> Dict[str, Any]:
        try:
            response = await self.client.request(
                method,
                f"{self.api_url}{path}",
                headers=self.headers,
                params=params,
                json=json,
                timeout=self.timeout,
            )
        except httpx.RequestError as e:
            reason = str(e) or e.__class__.__name__
            log.error("TaxoAI request failed", context=context, error=reason)
            raise NetworkError(f"TaxoAI API request failed ({context}): {reason}", context_name=context)

        return self.parse_response(response, context)

    @staticmethod
    def parse_response(response: httpx.Response, context: str = "") -> Dict[str, Any]:
        """Map an HTTP response to its decoded body or a typed error"""
        code = response.status_code

        try:
            data = response.json()
        except ValueError:
            data = None

        if code in (200, 201):
            return data if isinstance(data, dict) else {}

        log.warning("TaxoAI API error response", context=context, status_code=code)

        if code == 401:
            raise UnauthorizedError()

        if code == 402:
            raise PaymentRequiredError()

        if code == 429:
            retry_after = _parse_retry_after(response.headers.get("retry-after"))
            if retry_after is not None:
                message = f"Rate limit exceeded. Please try again in {retry_after} seconds."
            else:
                message = "Rate limit exceeded. Please try again later."
            raise RateLimitedError(message, retry_after=retry_after)

        if code in SERVER_ERROR_CODES:
            raise ServerError(upstream_status=code)

        message = "Unknown error"
        if isinstance(data, dict) and data.get("message"):
            message = str(data["message"])
        raise ApiError(f"TaxoAI API error (HTTP {code}): {message}", upstream_status=code)

    @staticmethod
    def _decode(model: Type[ResponseModel], data: Dict[str, Any], context: str) -> ResponseModel:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            log.error("Unexpected TaxoAI response shape", context=context, error=str(e))
            raise ApiError(f"TaxoAI API returned an unexpected response ({context}).", upstream_status=200)


def _parse_retry_after(value: Optional[str]) -> Optional[int]:
    if not value:
        return None
    try:
        return int(float(value))
    except ValueError:
        return None
