"""Helpers for payloads that Google SDKs return as either bytes or text."""

from __future__ import annotations

from typing import Union


def coerce_into_string(data: Union[bytes, str]) -> str:
    if isinstance(data, str):
        return data
    return data.decode("utf-8")


__all__ = ["coerce_into_string"]
