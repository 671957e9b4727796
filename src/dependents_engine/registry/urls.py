"""Repository URL helpers for GitHub-hosted packages."""

from __future__ import annotations

from urllib.parse import urlsplit

CANONICAL_PREFIX = "git://github.com/"
GITHUB_WEB = "https://github.com"


def is_canonical_url(url: str | None) -> bool:
    """True if *url* is a git://github.com/ repository URL."""
    return bool(url) and url.startswith(CANONICAL_PREFIX)


def _path_segments(url: str) -> list[str]:
    return [segment for segment in urlsplit(url).path.split("/") if segment]


def extract_owner(url: str) -> str:
    """Return the account/organization segment of a repository URL.

    Only meaningful for URLs accepted by ``is_canonical_url``.
    """
    segments = _path_segments(url)
    return segments[0] if segments else ""


def repo_slug(url: str) -> tuple[str, str] | None:
    """Return (owner, repo) for a GitHub URL in any common form, else None."""
    parts = urlsplit(url)
    host = parts.netloc.rsplit("@", 1)[-1].lower()
    if host not in ("github.com", "www.github.com"):
        return None
    segments = _path_segments(url)
    if len(segments) < 2:
        return None
    repo = segments[1]
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    return segments[0], repo


def to_https_url(url: str) -> str:
    """Rewrite a canonical git:// URL as its https://github.com page.

    Other URLs are returned unchanged.
    """
    if not is_canonical_url(url):
        return url
    path = urlsplit(url).path
    if path.endswith(".git"):
        path = path[: -len(".git")]
    return GITHUB_WEB + path


def to_canonical_url(owner: str, repo: str) -> str:
    return f"{CANONICAL_PREFIX}{owner}/{repo}.git"
