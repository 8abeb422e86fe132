"""Release sources.

Source is a closed union of the three supported kinds. Each variant exposes
``fetch_release()`` and ``to_dict()``; ``source_from_dict()`` decodes a stored
descriptor by its ``kind`` tag.
"""

from __future__ import annotations

from typing import Any

from appnest.core.sources.base import (
    MATCH_ARCH,
    MATCH_NO_ARCH,
    MATCH_NONE,
    Release,
    choose_appimage_asset,
    get_system_arch,
    guess_version,
)
from appnest.core.sources.github import GithubSource, parse_github_repo_url
from appnest.core.sources.http import HttpSource, extract_filename_from_url
from appnest.core.sources.local import LocalSource

Source = GithubSource | HttpSource | LocalSource

_SOURCE_KINDS: dict[str, type[GithubSource | HttpSource | LocalSource]] = {
    GithubSource.kind: GithubSource,
    HttpSource.kind: HttpSource,
    LocalSource.kind: LocalSource,
}


def source_from_dict(data: dict[str, Any]) -> Source:
    """Decode a stored source descriptor.

    Raises:
        ValueError: If the kind tag is unknown
        KeyError: If a required field is missing

    """
    kind = data.get("kind")
    source_cls = _SOURCE_KINDS.get(str(kind))
    if source_cls is None:
        msg = f"Unknown source kind: {kind!r}"
        raise ValueError(msg)
    return source_cls.from_dict(data)


__all__ = [
    "MATCH_ARCH",
    "MATCH_NONE",
    "MATCH_NO_ARCH",
    "GithubSource",
    "HttpSource",
    "LocalSource",
    "Release",
    "Source",
    "choose_appimage_asset",
    "extract_filename_from_url",
    "get_system_arch",
    "guess_version",
    "parse_github_repo_url",
    "source_from_dict",
]
