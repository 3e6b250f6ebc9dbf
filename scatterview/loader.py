"""Dataset source: fetch a JSON array of rows from a URL or a local file.

Every failure mode (transport error, non-2xx status, unreadable file,
invalid JSON, a payload that is not a list of objects) is reported as
:class:`~scatterview.errors.LoadError` so callers handle one exception type.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import httpx

from .errors import LoadError

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

DEFAULT_TIMEOUT_S = 10.0


def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def fetch_dataset(
    source: str | Path,
    *,
    client: httpx.Client | None = None,
    timeout: float = DEFAULT_TIMEOUT_S,
) -> list[dict[str, Any]]:
    """Return the rows stored at ``source``.

    Parameters
    ----------
    source : str or Path
        ``http(s)://`` URL or filesystem path of a JSON document whose top
        level is an array of objects.
    client : httpx.Client, optional
        Client used for URL sources. A short-lived client is created when
        omitted.
    timeout : float
        Request timeout in seconds for the short-lived client.

    Raises
    ------
    LoadError
        On any fetch, decode or shape failure.
    """
    label = str(source)
    if isinstance(source, str) and _is_url(source):
        text = _fetch_url(source, client=client, timeout=timeout)
    else:
        try:
            text = Path(source).read_text(encoding="utf-8")
        except OSError as e:
            raise LoadError(f"Could not read dataset file: {e}", source=label) from e
        except UnicodeDecodeError as e:
            raise LoadError(f"Dataset file is not valid UTF-8: {e}", source=label) from e

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise LoadError(f"Dataset is not valid JSON: {e}", source=label) from e

    rows = validate_payload(payload, source=label)
    logger.info("fetched %d rows from %s", len(rows), label)
    return rows


def _fetch_url(url: str, *, client: httpx.Client | None, timeout: float) -> str:
    try:
        if client is None:
            with httpx.Client(timeout=timeout, follow_redirects=True) as own:
                response = own.get(url)
                response.raise_for_status()
                return response.text
        response = client.get(url)
        response.raise_for_status()
        return response.text
    except httpx.HTTPStatusError as e:
        raise LoadError(
            f"Dataset request failed with HTTP {e.response.status_code}", source=url
        ) from e
    except httpx.HTTPError as e:
        raise LoadError(f"Dataset request failed: {e}", source=url) from e


def validate_payload(payload: Any, *, source: str | None = None) -> list[dict[str, Any]]:
    """Check that ``payload`` is a list of JSON objects and return it.

    Raises
    ------
    LoadError
        If the top level is not an array or an element is not an object.
    """
    if not isinstance(payload, list):
        raise LoadError(
            f"Dataset must be a JSON array, got {type(payload).__name__}", source=source
        )
    for index, row in enumerate(payload):
        if not isinstance(row, dict):
            raise LoadError(
                f"Dataset element {index} is a {type(row).__name__}, expected an object",
                source=source,
            )
    return payload


__all__ = ["DEFAULT_TIMEOUT_S", "fetch_dataset", "validate_payload"]
