"""Domain helpers for card profiles (resource links)."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

MAX_RESOURCES = 10


class TooManyResourcesError(ValueError):
    """Raised when a profile carries more labeled resources than a card can show."""


@dataclass(frozen=True)
class ResourceLink:
    title: str
    url: str

    def to_dict(self) -> dict:
        return {"title": self.title, "url": self.url}


def _clean(value: Any) -> str:
    return str(value or "").strip()


def normalize_resources(items: Iterable[Any] | None) -> list[dict]:
    """
    Validate resource links before they are stored.

    Accepts dicts or ResourceLink instances, trims values, drops entries with
    neither title nor url and keeps the given order. More than MAX_RESOURCES
    entries is rejected.
    """
    cleaned: list[dict] = []
    for item in items or []:
        if isinstance(item, ResourceLink):
            title, url = _clean(item.title), _clean(item.url)
        elif isinstance(item, dict):
            title, url = _clean(item.get("title")), _clean(item.get("url"))
        else:
            raise TypeError(f"Unsupported resource entry: {item!r}")
        if not title and not url:
            continue
        cleaned.append({"title": title, "url": url})
    if len(cleaned) > MAX_RESOURCES:
        raise TooManyResourcesError(f"At most {MAX_RESOURCES} resources are allowed")
    return cleaned


def resource_links(items: Iterable[Any] | None) -> list[ResourceLink]:
    """Stored resources that have both a title and a url, in stored order."""
    links: list[ResourceLink] = []
    for item in items or []:
        if not isinstance(item, dict):
            continue
        title, url = _clean(item.get("title")), _clean(item.get("url"))
        if title and url:
            links.append(ResourceLink(title=title, url=url))
    return links
