"""Batch request authorization strategies: static credentials or GitHub organization membership.

Each strategy takes the identity/secret pair from HTTP Basic auth. ``validate`` returns None
when the pair is accepted and raises AuthorizationError with a human-readable reason otherwise.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from functools import lru_cache

import httpx

from lfs_batch.core.config import ConfigError, Settings, get_settings
from lfs_batch.core.security import constant_time_equals

logger = logging.getLogger(__name__)


class AuthorizationError(Exception):
    """Credentials were rejected; str(exc) is the reason reported to the client."""


class Authorizer(ABC):
    @abstractmethod
    def validate(self, identity: str, secret: str) -> None:
        ...


class StaticCredentials(Authorizer):
    """Accept exactly one username/password pair."""

    def __init__(self, username: str, password: str) -> None:
        self._username = username
        self._password = password

    def validate(self, identity: str, secret: str) -> None:
        # Evaluate both comparisons so timing does not reveal which one failed
        user_ok = constant_time_equals(identity, self._username)
        pass_ok = constant_time_equals(secret, self._password)
        if not (user_ok and pass_ok):
            raise AuthorizationError("invalid credentials")


class GithubOrgMembership(Authorizer):
    """Accept any caller whose GitHub token (sent as the Basic password) belongs to a member of org.

    The Basic username is ignored. Membership is looked up on every request via GET /user/orgs.
    """

    def __init__(
        self,
        org: str,
        api_url: str = "https://api.github.com",
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.org = org
        self._client = httpx.Client(
            base_url=api_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/vnd.github+json"},
        )

    def validate(self, identity: str, secret: str) -> None:
        try:
            r = self._client.get("/user/orgs", headers={"Authorization": f"Bearer {secret}"})
            r.raise_for_status()
            orgs = r.json()
        except httpx.HTTPStatusError as e:
            raise AuthorizationError(f"GitHub API returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.warning("GitHub org lookup failed: %s", type(e).__name__)
            raise AuthorizationError(str(e) or type(e).__name__) from e
        except ValueError as e:
            raise AuthorizationError("could not decode GitHub organization list") from e
        if not isinstance(orgs, list):
            raise AuthorizationError("could not decode GitHub organization list")
        for entry in orgs:
            if isinstance(entry, dict) and entry.get("login") == self.org:
                return None
        raise AuthorizationError(f"user must be member of Github organization {self.org}")

    def close(self) -> None:
        self._client.close()


def build_authorizer(settings: Settings) -> Authorizer | None:
    """Select the strategy named by AUTH_MODE. Returns None when authorization is disabled."""
    mode = settings.auth_mode.strip().lower()
    if mode == "none":
        return None
    if mode == "static":
        if not settings.lfs_user or not settings.lfs_pass:
            raise ConfigError("LFS_USER and LFS_PASS must be set")
        return StaticCredentials(settings.lfs_user, settings.lfs_pass)
    if mode == "github_org":
        if not settings.github_org:
            raise ConfigError("GITHUB_ORG must be set")
        return GithubOrgMembership(
            settings.github_org,
            api_url=settings.github_api_url,
            timeout=settings.github_timeout_seconds,
        )
    raise ConfigError(f"unknown auth_mode: {settings.auth_mode}")


@lru_cache
def get_authorizer() -> Authorizer | None:
    return build_authorizer(get_settings())
