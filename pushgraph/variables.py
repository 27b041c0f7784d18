"""Template variable construction: repository URL parsing and commit message directives."""

import posixpath
from urllib.parse import urlsplit

from pushgraph.models import Push, Repository, RepositoryUrl, TemplateVariables

TRY_PREFIX = "try:"


def resolve_url(url: str) -> RepositoryUrl:
    """Split a repository URL into the host and path parts used by template URL patterns.

    https://hg.mozilla.org/try/  → host="https://hg.mozilla.org", path="/try"
    https://hg.mozilla.org/      → host="https://hg.mozilla.org", path=""
    """
    parsed = urlsplit(url)
    path = posixpath.normpath(parsed.path or "/")
    # POSIX keeps a leading "//"; collapse it like any other repeated separator
    if path.startswith("//"):
        path = "/" + path.lstrip("/")
    if path == "/":
        path = ""

    scheme = f"{parsed.scheme}:" if parsed.scheme else "http:"
    host = parsed.hostname or ""
    if parsed.port:
        host = f"{host}:{parsed.port}"
    return RepositoryUrl(path=path, host=f"{scheme}//{host}")


def parse_commit_message(message: str) -> str | None:
    """Return the try directive ("try: ...") up to the end of its line, or None."""
    start = message.find(TRY_PREFIX)
    if start == -1:
        return None
    end = message.find("\n", start)
    if end == -1:
        end = len(message)
    return message[start:end]


def url_variables(repo: Repository, revision: str) -> dict[str, str]:
    """Variables available to the template URL pattern in the project registry."""
    parts = resolve_url(repo.url)
    return {
        "alias": repo.alias,
        "revision": revision,
        "path": parts.path,
        "host": parts.host,
    }


def build_template_variables(
    push: Push,
    repo: Repository,
    level: int,
    source: str,
    revision_hash: str | None = None,
) -> TemplateVariables:
    tip = push.tip
    return TemplateVariables(
        owner=push.user,
        revision=tip.node,
        project=repo.alias,
        level=level,
        revision_hash=revision_hash,
        # An empty string renders as "unset" in templates; a single space does not.
        comment=parse_commit_message(tip.desc) or " ",
        pushlog_id=str(push.id),
        url=repo.url,
        pushdate=push.date,
        source=source,
    )
