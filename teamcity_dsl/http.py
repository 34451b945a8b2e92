"""Shared HTTP helpers for teamcity_dsl."""

from __future__ import annotations

from typing import Dict

import httpx

from .version import USER_AGENT


def request_headers() -> Dict[str, str]:
    return {"User-Agent": USER_AGENT}


def default_http_client(timeout: httpx.Timeout) -> httpx.Client:
    return httpx.Client(timeout=timeout, follow_redirects=True, headers=request_headers())


def describe_http_error(exc: httpx.HTTPError) -> str:
    if isinstance(exc, httpx.HTTPStatusError):
        response = exc.response
        return f"{response.status_code} {response.reason_phrase}".strip()

    try:
        request = exc.request
    except RuntimeError:
        request = None
    target = ""
    if request is not None:
        method = getattr(request, "method", "") or ""
        url = getattr(request, "url", None)
        url_str = str(url) if url is not None else ""
        target = f"{method} {url_str}".strip()

    message = str(exc).strip()
    summary = message or exc.__class__.__name__
    if isinstance(exc, httpx.TimeoutException):
        summary = "request timed out"
        if message and "timed out" not in message.lower():
            summary = f"{summary}: {message}"
    elif isinstance(exc, httpx.ConnectError):
        summary = "failed to connect"
        if message and "connect" not in message.lower():
            summary = f"{summary}: {message}"
    elif isinstance(exc, httpx.RequestError):
        summary = "network error"
        if message and "network" not in message.lower():
            summary = f"{summary}: {message}"

    if target and target not in summary:
        summary = f"{summary} ({target})"
    return summary
