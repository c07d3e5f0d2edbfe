"""Caller authentication for the storefront API."""

import os

from shared.auth.port import Authenticator, Caller


def build_authenticator() -> Authenticator:
    """Build the authenticator selected by ``STOREFRONT_AUTH_ADAPTER`` (default: header)."""
    adapter = os.environ.get("STOREFRONT_AUTH_ADAPTER", "header")
    if adapter == "header":
        from shared.auth.header_adapter import HeaderAuthenticator

        return HeaderAuthenticator()
    raise ValueError(f"Unknown authenticator adapter: {adapter}")


__all__ = ["Authenticator", "Caller", "build_authenticator"]
