"""
Snippetbox — Liveness Route
=============================

What:  GET /ping → 200 "OK".
How:   Bypasses sessions, CSRF and authentication (see middleware
       EXCLUDED_PATHS); touches no storage, so it only proves the process
       is serving requests.
"""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter(tags=["Health"])


@router.get("/ping", response_class=PlainTextResponse, summary="Liveness check")
async def ping() -> PlainTextResponse:
    return PlainTextResponse("OK")
