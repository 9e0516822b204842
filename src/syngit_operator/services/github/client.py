"""GitHub identity verification client."""

from __future__ import annotations

import logging
import time

import requests

from ... import metrics
from ...utils.errors import VerificationError
from ...utils.rate_limit import rate_limit_github

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT_SECONDS = 10.0


class GitHubIdentityVerifier:
    """Verify a GitHub token by asking the API who it belongs to."""

    def __init__(
        self,
        token: str,
        api_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize the verifier.

        Args:
            token: Personal access token used as bearer credential
            api_url: Base URL of the GitHub REST API
            timeout: Timeout in seconds for the whole request
            session: Optional session, mostly for tests
        """
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._token = token
        self.session = session or requests.Session()

    @property
    def user_url(self) -> str:
        return f"{self.api_url}/user"

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "syngit-remoteuser-operator",
        }

    @rate_limit_github
    def verify(self) -> str:
        """Return the login of the authenticated user.

        Raises:
            VerificationError: If GitHub rejects the token or answers with
                something that is not a user
            requests.RequestException: On network errors and timeouts
        """
        start_time = time.time()
        try:
            response = self.session.get(self.user_url, headers=self._headers(), timeout=self.timeout)
            if response.status_code != 200:
                raise VerificationError(self._format_error(response))
            try:
                login = response.json().get("login")
            except ValueError as e:
                raise VerificationError(f"GET {self.user_url}: invalid JSON response") from e
            if not login:
                raise VerificationError(f"GET {self.user_url}: response carries no login")
            metrics.api_call_total.labels(api_type="github", operation="get_user", result="success").inc()
            return login
        except Exception:
            metrics.api_call_total.labels(api_type="github", operation="get_user", result="error").inc()
            raise
        finally:
            duration = time.time() - start_time
            metrics.api_call_duration_seconds.labels(api_type="github", operation="get_user").observe(duration)

    def _format_error(self, response: requests.Response) -> str:
        """Render an error response as "GET <url>: <code> <message> [<errors>]"."""
        message = response.reason or ""
        errors: list[str] = []
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict):
            message = payload.get("message") or message
            for item in payload.get("errors") or []:
                errors.append(item.get("message", "") if isinstance(item, dict) else str(item))
        return f"GET {self.user_url}: {response.status_code} {message} [{', '.join(errors)}]"
