from __future__ import annotations

import json
import socket
from http.client import HTTPException
from abc import ABC, abstractmethod
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from quoteservice.errors import SourceDataInvalid, SourceTimeout, SourceUnavailable
from quoteservice.schemas.quote import Quote


def round2(value: float) -> float:
    return round(float(value), 2)


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def change_from_previous(current: float, previous: float) -> tuple[float, float]:
    """Return ``(change, change_percent)`` relative to a previous reference price."""
    change = current - previous
    change_percent = (change / previous) * 100 if previous != 0 else 0.0
    return change, change_percent


class QuoteSource(ABC):
    """One upstream quote provider.

    Implementations raise only ``SourceTimeout``, ``SourceUnavailable`` or
    ``SourceDataInvalid`` and keep no per-request state.
    """

    name: str
    timeout: float

    def __init__(self, user_agent: str) -> None:
        self.user_agent = user_agent

    @abstractmethod
    def fetch_quote(self, symbol: str) -> Quote:
        raise NotImplementedError

    def _get_json(self, url: str, symbol: str) -> Any:
        request = Request(url, headers={"User-Agent": self.user_agent, "Accept": "application/json"})
        try:
            with urlopen(request, timeout=self.timeout) as response:
                body = response.read()
        except HTTPError as exc:
            raise SourceUnavailable(
                self.name, symbol, f"HTTP {exc.code}", status_code=exc.code
            ) from exc
        except (TimeoutError, socket.timeout) as exc:
            raise SourceTimeout(self.name, symbol, f"timed out after {self.timeout:g}s") from exc
        except URLError as exc:
            if isinstance(exc.reason, (TimeoutError, socket.timeout)):
                raise SourceTimeout(
                    self.name, symbol, f"timed out after {self.timeout:g}s"
                ) from exc
            raise SourceUnavailable(self.name, symbol, str(exc.reason)) from exc
        except (HTTPException, OSError) as exc:
            raise SourceUnavailable(self.name, symbol, f"connection failed: {exc!r}") from exc

        try:
            return json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise SourceDataInvalid(self.name, symbol, "response is not valid JSON") from exc
