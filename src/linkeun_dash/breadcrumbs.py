from __future__ import annotations

from typing import Final

ROUTE_LABELS: Final[dict[str, str]] = {
    "auth": "Authentication",
    "login": "Login",
    "register": "Register",
    "verify": "Verify Account",
    "links": "Links",
    "create": "Create",
    "update": "Update",
    "settings": "Settings",
    "tools": "Tools",
}

DYNAMIC_ROUTE_LABELS: Final[dict[str, str]] = {
    "[token]": "Token Verification",
    "[id]": "Details",
    "[slug]": "Item",
    "[...rest]": "Path",
}


def segment_to_label(segment: str) -> str:
    if segment in ROUTE_LABELS:
        return ROUTE_LABELS[segment]

    if segment.startswith("[") and segment.endswith("]"):
        return DYNAMIC_ROUTE_LABELS.get(segment, "Details")

    # kebab-case -> Title Case
    return " ".join(word[:1].upper() + word[1:] for word in segment.split("-"))


def build_breadcrumbs(
    path: str, route_pattern: str | None = None
) -> list[tuple[str, str]]:
    """Breadcrumb trail for a URL path as (label, href) pairs.

    When `route_pattern` is given (e.g. "/links/[id]/update"), its dynamic segments
    supply the labels while hrefs still come from the concrete path.
    """

    segments = [s for s in path.split("/") if s]
    labels = segments
    if route_pattern is not None:
        pattern = [s for s in route_pattern.split("/") if s]
        if len(pattern) == len(segments):
            labels = pattern

    crumbs: list[tuple[str, str]] = []
    for i, label_segment in enumerate(labels):
        href = "/" + "/".join(segments[: i + 1])
        crumbs.append((segment_to_label(label_segment), href))
    return crumbs
