from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, TypeVar

import httpx

from . import config
from .models import (
    FinancialEvent,
    MortgageTerms,
    expense_from_api,
    income_from_api,
    mortgage_from_api,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ApiError(RuntimeError):
    def __init__(self, message: str, *, status_code: Optional[int] = None, endpoint: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.endpoint = endpoint


@dataclass(frozen=True)
class ApiSession:
    """Authentication context handed to the client explicitly."""

    token: str
    base_url: str = config.API_BASE_URL

    @classmethod
    def from_env(cls) -> Optional["ApiSession"]:
        if not config.API_TOKEN:
            return None
        return cls(token=config.API_TOKEN, base_url=config.API_BASE_URL)


@dataclass
class Portfolio:
    properties: List[Dict[str, Any]] = field(default_factory=list)
    incomes: List[FinancialEvent] = field(default_factory=list)
    expenses: List[FinancialEvent] = field(default_factory=list)
    mortgages: List[MortgageTerms] = field(default_factory=list)

    def property_names(self) -> Dict[str, str]:
        names: Dict[str, str] = {}
        for prop in self.properties:
            prop_id = str(prop.get("_id") or prop.get("id") or "")
            if prop_id:
                names[prop_id] = str(prop.get("name") or prop_id)
        return names

    @property
    def is_empty(self) -> bool:
        return not (self.properties or self.incomes or self.expenses or self.mortgages)


class PortfolioClient:
    """Read-only client for the PropieXpert backend."""

    def __init__(
        self,
        session: ApiSession,
        *,
        timeout: float = config.API_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.session = session
        self._client = httpx.Client(
            base_url=session.base_url.rstrip("/"),
            headers={
                "Authorization": f"Bearer {session.token}",
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "PortfolioClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ---- transport ----

    def _get_json(self, path: str) -> Any:
        try:
            r = self._client.get(path)
        except httpx.HTTPError as e:
            raise ApiError(f"Network error: {e}", endpoint=path) from e

        if r.status_code < 200 or r.status_code >= 300:
            detail = r.text.strip() or r.reason_phrase
            logger.warning("Backend rejected request", extra={"endpoint": path, "status_code": r.status_code})
            raise ApiError(f"Error: {detail}", status_code=r.status_code, endpoint=path)

        try:
            return r.json()
        except ValueError as e:
            raise ApiError("Could not decode backend response", status_code=r.status_code, endpoint=path) from e

    def _get_list(self, path: str, key: Optional[str] = None) -> List[Dict[str, Any]]:
        data = self._get_json(path)
        if key is not None and isinstance(data, dict):
            data = data.get(key)
        if not isinstance(data, list):
            raise ApiError(f"Expected a list from {path}", endpoint=path)
        return [item for item in data if isinstance(item, dict)]

    def _decode_each(self, path: str, records: List[Dict[str, Any]], decode: Callable[[Dict[str, Any]], T]) -> List[T]:
        decoded: List[T] = []
        for record in records:
            try:
                decoded.append(decode(record))
            except (TypeError, ValueError, AttributeError, OverflowError):
                logger.warning("Skipping malformed record", exc_info=True, extra={"endpoint": path})
        return decoded

    # ---- endpoints ----

    def fetch_properties(self) -> List[Dict[str, Any]]:
        return self._get_list("/properties/")

    def fetch_incomes(self) -> List[FinancialEvent]:
        path = "/incomes/"
        return self._decode_each(path, self._get_list(path), income_from_api)

    def fetch_expenses(self) -> List[FinancialEvent]:
        path = "/expenses/"
        return self._decode_each(path, self._get_list(path), expense_from_api)

    def fetch_mortgages(self, property_id: Optional[str] = None) -> List[MortgageTerms]:
        path = "/mortgages/"
        mortgages = self._decode_each(path, self._get_list(path), mortgage_from_api)
        if property_id is not None:
            mortgages = [m for m in mortgages if m.property_id == property_id or m.id == property_id]
        return mortgages

    def fetch_property_performance(self) -> List[Dict[str, Any]]:
        return self._get_list("/dashboard/", key="property_performance")

    def fetch_financial_summary(self, property_id: str) -> Dict[str, Any]:
        path = f"/properties/{property_id}/financial-summary"
        data = self._get_json(path)
        if not isinstance(data, dict):
            raise ApiError(f"Expected an object from {path}", endpoint=path)
        return data

    def fetch_portfolio(self) -> Portfolio:
        return Portfolio(
            properties=self.fetch_properties(),
            incomes=self.fetch_incomes(),
            expenses=self.fetch_expenses(),
            mortgages=self.fetch_mortgages(),
        )
