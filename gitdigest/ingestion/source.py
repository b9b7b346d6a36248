"""
Repository locators.

Validates user-supplied repository URLs against the allow-listed Git
hosts and derives the URL that is actually cloned.
"""

import re
from dataclasses import dataclass
from typing import Optional, Tuple
from urllib.parse import quote

from gitdigest.core.exceptions import InvalidSourceError

ALLOWED_HOSTS = ("github.com", "gitlab.com", "bitbucket.org")

# Username paired with a token when authenticating over HTTPS
TOKEN_USERNAMES = {
    "github.com": "x-access-token",
    "gitlab.com": "oauth2",
    "bitbucket.org": "x-token-auth",
}

REPOSITORY_URL_PATTERN = re.compile(
    r"^(?P<scheme>https?)://(?P<host>github\.com|gitlab\.com|bitbucket\.org)"
    r"/(?P<owner>[^/\s?#]+)/(?P<path>[^\s?#]+?)/?$",
    re.IGNORECASE,
)

# GitLab separates the project path from web UI routes with "/-/"
_GITLAB_ROUTE_MARKER = "/-/"


@dataclass(frozen=True)
class RepositorySource:
    """A validated remote repository plus an optional access credential."""

    url: str
    scheme: str
    host: str
    owner: str
    name: str
    credential: Optional[str] = None
    private: bool = False

    @classmethod
    def parse(
        cls,
        url: str,
        credential: Optional[str] = None,
        private: bool = False,
    ) -> "RepositorySource":
        """
        Validate a repository URL.

        Args:
            url: URL as supplied by the caller.
            credential: Optional access token for private repositories.
            private: Whether the caller flagged the repository as private.

        Returns:
            RepositorySource for the URL.

        Raises:
            InvalidSourceError: If the URL is not allowed, or a private
                source comes without a credential.
        """
        if not isinstance(url, str) or not url.strip():
            raise InvalidSourceError(str(url), "URL cannot be empty")

        url = url.strip()
        match = REPOSITORY_URL_PATTERN.match(_strip_query(url))
        if not match:
            raise InvalidSourceError(
                url,
                "expected http(s)://{github.com|gitlab.com|bitbucket.org}/<owner>/<name>",
            )

        host = match.group("host").lower()
        owner, name = _split_repository_path(host, match.group("owner"), match.group("path"))
        if not name or {owner, name} & {".", ".."}:
            raise InvalidSourceError(url, "missing owner or repository name")

        if credential is not None and not isinstance(credential, str):
            raise InvalidSourceError(url, "credential must be a string")
        credential = credential.strip() if credential else None
        if private and not credential:
            raise InvalidSourceError(url, "a credential is required for private repositories")

        return cls(
            url=url,
            scheme=match.group("scheme").lower(),
            host=host,
            owner=owner,
            name=name,
            credential=credential,
            private=bool(private),
        )

    @property
    def identifier(self) -> str:
        """Repository identifier reported in digests."""
        return self.url

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def clone_url(self) -> str:
        """URL passed to git, without credentials."""
        return f"{self.scheme}://{self.host}/{self.full_name}.git"

    def authenticated_clone_url(self) -> str:
        """URL passed to git, with the credential embedded when present."""
        if not self.credential:
            return self.clone_url
        username = TOKEN_USERNAMES.get(self.host, "git")
        token = quote(self.credential, safe="")
        return f"{self.scheme}://{username}:{token}@{self.host}/{self.full_name}.git"

    def redact(self, text: str) -> str:
        """Strip the credential from text destined for logs or errors."""
        if not text or not self.credential:
            return text
        for secret in {self.credential, quote(self.credential, safe="")}:
            text = text.replace(secret, "***")
        return text

    def __repr__(self) -> str:
        return (
            f"RepositorySource(url={self.url!r}, private={self.private}, "
            f"credential={'***' if self.credential else None})"
        )


def _strip_query(url: str) -> str:
    """Drop a trailing query string or fragment (?tab=readme, #readme)."""
    return url.split("#", 1)[0].split("?", 1)[0]


def _split_repository_path(host: str, owner: str, path: str) -> Tuple[str, str]:
    """
    Split the path after the owner into (namespace, name).

    GitHub and Bitbucket repositories are always ``owner/name``; anything
    after the name is a web UI route. GitLab allows nested subgroups, so
    the project path runs up to the ``/-/`` route marker.
    """
    if host == "gitlab.com":
        path = ("/" + path).split(_GITLAB_ROUTE_MARKER, 1)[0]
        segments = [segment for segment in path.split("/") if segment]
        if not segments:
            return owner, ""
        namespace = "/".join([owner] + segments[:-1])
        name = segments[-1]
    else:
        segments = [segment for segment in path.split("/") if segment]
        if not segments:
            return owner, ""
        namespace, name = owner, segments[0]

    if name.endswith(".git"):
        name = name[: -len(".git")]
    return namespace, name
