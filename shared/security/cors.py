"""
Origin allow-listing.

ALLOWED_ORIGINS entries match an Origin exactly, or as a wildcard pattern
where "*" stands for any run of characters ("https://*.golfjobs.com").
An empty list allows every origin.
"""
import re
from typing import Iterable, List, Optional
from urllib.parse import urlsplit

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware


def _entry_regex(entry: str) -> str:
    return re.escape(entry).replace(r"\*", ".*")


def build_origin_regex(allowed: Iterable[str]) -> str:
    entries = [e for e in allowed if e]
    if not entries:
        return ".*"
    return "|".join(f"(?:{_entry_regex(e)})" for e in entries)


def is_origin_allowed(origin: Optional[str], allowed: List[str]) -> bool:
    # Same-origin / server-to-server calls carry no Origin header
    if not origin:
        return True
    if not allowed:
        return True
    return re.fullmatch(build_origin_regex(allowed), origin) is not None


def url_origin(url: str) -> Optional[str]:
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        return None
    return f"{parts.scheme}://{parts.netloc}"


def configure_cors(app: FastAPI, allowed: List[str]):
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=build_origin_regex(allowed),
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )
