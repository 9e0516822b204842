"""Base identity verification interface."""

from __future__ import annotations

from typing import Callable, Protocol


class IdentityVerifier(Protocol):
    """Protocol defining the remote identity verification capability."""

    def verify(self) -> str:
        """Verify the credential and return the login it belongs to.

        Raises:
            Exception: Any failure (network, timeout, rejected credential)
        """
        ...


VerifierFactory = Callable[[str], IdentityVerifier]
