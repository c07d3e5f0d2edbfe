"""Storefront-specific FastAPI dependencies."""

from fastapi import Request

from shared.cache import Caches


def get_caches(request: Request) -> Caches:
    return request.app.state.caches


def get_placement(request: Request):
    return request.app.state.placement
