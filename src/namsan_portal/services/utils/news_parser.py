"""Pull the stock-news JSON array out of free-text model output.

Models are asked for bare JSON but often wrap it in prose or markdown
fences, so the array is taken from the first `[` to the last `]`. Parsing
never raises: callers get a result that is either ok or carries the reason.
"""
import json
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError


class StockNewsItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    stock_name: str
    bullets: list[str]


_ITEMS = TypeAdapter(list[StockNewsItem])


@dataclass(frozen=True)
class JsonArrayExtraction:
    items: list[Any] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class StockNewsExtraction:
    items: list[StockNewsItem] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def extract_json_array(text: str) -> JsonArrayExtraction:
    """Decode the text between the first `[` and the last `]` as a JSON array."""
    start = text.find("[")
    end = text.rfind("]")
    if start == -1 or end < start:
        return JsonArrayExtraction(error="no JSON array in response")
    try:
        value = json.loads(text[start:end + 1])
    except json.JSONDecodeError as exc:
        return JsonArrayExtraction(error=f"invalid JSON array: {exc.msg}")
    if not isinstance(value, list):
        return JsonArrayExtraction(error="bracketed value is not an array")
    return JsonArrayExtraction(items=value)


def parse_stock_news(text: str) -> StockNewsExtraction:
    """Extract `[{"stock_name": ..., "bullets": [...]}, ...]` from model output."""
    extraction = extract_json_array(text)
    if not extraction.ok:
        return StockNewsExtraction(error=extraction.error)
    try:
        items = _ITEMS.validate_python(extraction.items)
    except ValidationError as exc:
        return StockNewsExtraction(error=f"unexpected item shape: {exc.error_count()} errors")
    return StockNewsExtraction(items=items)
