"""Send LanguageTool server queries as POST bodies.

language_tool_python queries its server with GET requests, which puts the
whole document into the URL. Long LaTeX or Markdown documents exceed the
server's URL limit and the connection is reset. The replacement below posts
the same parameters as form data instead.
"""

from __future__ import annotations

import http.client
import json
import logging
from typing import Any, Dict, Optional

import requests
from language_tool_python.utils import LanguageToolError, RateLimitError

LOGGER = logging.getLogger(__name__)


def _query_server_post(
    self: Any,
    url: str,
    params: Optional[Dict[str, str]] = None,
    num_tries: int = 2,
) -> Any:
    """Drop-in replacement for ``LanguageTool._query_server`` using POST.

    :param self: The LanguageTool instance
    :param url: The URL to query
    :param params: Parameters sent in the request body
    :param num_tries: Attempts before giving up
    :raises LanguageToolError: If the query fails after all attempts
    """
    if params and "text" in params:
        LOGGER.debug("POST %s (%d characters)", url, len(params["text"]))

    for attempt in range(num_tries):
        try:
            with requests.post(url, data=params, timeout=self._TIMEOUT) as response:
                try:
                    return response.json()
                except json.decoder.JSONDecodeError as e:
                    if response.status_code == 426:
                        raise RateLimitError(
                            "You have exceeded the rate limit for the free "
                            "LanguageTool API. Please try again later."
                        ) from e
                    raise LanguageToolError(response.content.decode()) from e
        except (IOError, http.client.HTTPException) as e:
            LOGGER.warning("LanguageTool query %d/%d failed: %s", attempt + 1, num_tries, e)
            if self._remote is False:
                LOGGER.info("Restarting local LanguageTool server")
                self._terminate_server()
                self._start_local_server()
            if attempt + 1 >= num_tries:
                raise LanguageToolError(f"{self._url}: {e}") from e
    return None


def apply_post_request_patch() -> None:
    """Install :func:`_query_server_post` on ``LanguageTool`` (idempotent)."""
    import language_tool_python.server as lt_server

    if getattr(lt_server.LanguageTool, "_query_server", None) is _query_server_post:
        return
    lt_server.LanguageTool._query_server = _query_server_post
    LOGGER.debug("LanguageTool queries will use POST requests")

