"""Shared request dependencies"""
from fastapi import Request


async def read_raw_body(request: Request) -> bytes:
    """Request body exactly as transmitted

    Signature verification is byte-exact, so the ingestion route reads the
    body through this dependency and declares no pydantic body model:
    nothing decodes, re-encodes or normalizes the bytes first.
    """
    return await request.body()
