"""
Thin JSON-over-HTTP helper shared by the REST adapters.
"""

from typing import Any, Dict, Optional, Tuple

import requests

from ..core.errors import ParseError, RetrievalError


def request_json(method: str, url: str, headers: Dict[str, str] = None, payload: Any = None,
                 params: Dict[str, Any] = None, timeout: float = 30.0) -> Tuple[int, Any]:
    """
    Send a request and decode the JSON body.

    Non-success status codes are returned, not raised, so callers can log the
    body. Transport failures raise RetrievalError; an undecodable body raises
    ParseError.

    Returns:
        (status_code, decoded_json)
    """
    try:
        response = requests.request(method, url, headers=headers, json=payload,
                                    params=params, timeout=timeout)
    except requests.RequestException as e:
        raise RetrievalError(f"{method} {url} failed: {e}") from e

    try:
        data = response.json()
    except ValueError as e:
        raise ParseError(f"{method} {url} returned non-JSON body (status {response.status_code})") from e

    return response.status_code, data


def dig(data: Any, *path: Any) -> Optional[Any]:
    """Walk nested dicts/lists, returning None on the first missing step."""
    current = data
    for step in path:
        try:
            current = current[step]
        except (KeyError, IndexError, TypeError):
            return None
    return current
