"""Builder for identity verifier instances."""

from __future__ import annotations

import os

from ..services.github.client import DEFAULT_API_URL, DEFAULT_TIMEOUT_SECONDS, GitHubIdentityVerifier


def create_verifier_from_token(token: str) -> GitHubIdentityVerifier:
    """Create an identity verifier for a bearer token.

    Args:
        token: Credential read from the referenced Secret

    Returns:
        Configured GitHub identity verifier
    """
    api_url = os.getenv("GITHUB_API_URL", DEFAULT_API_URL)
    timeout = float(os.getenv("GITHUB_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS)))
    return GitHubIdentityVerifier(token=token, api_url=api_url, timeout=timeout)
