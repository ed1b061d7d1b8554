#!/usr/bin/env python3
"""
Wikitext helpers for survey reports.

Rewrites links so that a report assembled from many wikis renders correctly
when saved on the home wiki, and normalizes titles and usernames.
"""

import re
from typing import Iterable

LINK_TITLE = re.compile(r"\[\[:?([^\[\]\n|#]+)")

# Hostnames whose interwiki prefix is not their first label
SPECIAL_PREFIXES = {
    "www.wikidata.org": "d",
}


def wiki_prefix(hostname: str) -> str:
    """
    Derive the interwiki prefix for a wiki hostname.

    Args:
        hostname: Bare hostname (e.g., "de.wikipedia.org")

    Returns:
        Interwiki prefix (e.g., "de"; "d" for www.wikidata.org)
    """
    if hostname in SPECIAL_PREFIXES:
        return SPECIAL_PREFIXES[hostname]
    return hostname.split(".", 1)[0]


def rewrite_links(text: str, prefix: str) -> str:
    """
    Prefix local links with an interwiki prefix.

    Args:
        text: Wikitext report fragment
        prefix: Interwiki prefix (e.g., "de")

    Returns:
        Wikitext where "[[:X" becomes "[[:prefix:X" and "[[Special" becomes
        "[[:prefix:Special"
    """
    text = text.replace("[[:", f"[[:{prefix}:")
    text = text.replace("[[Special", f"[[:{prefix}:Special")
    return text


def _ucfirst(text: str) -> str:
    return text[:1].upper() + text[1:]


def normalize_username(name: str) -> str:
    """Apply MediaWiki title normalization to a username."""
    name = name.replace("_", " ").strip()
    return _ucfirst(" ".join(name.split()))


def strip_namespace(title: str, namespace_names: Iterable[str]) -> str:
    """
    Remove a leading namespace prefix from a title.

    Args:
        title: Page title (e.g., "User:Foo")
        namespace_names: Names that count as the namespace (e.g., ["User"])

    Returns:
        Title without the prefix (e.g., "Foo"); unchanged if it has none
    """
    if ":" not in title:
        return title
    head, rest = title.split(":", 1)
    head = head.replace("_", " ").strip().casefold()
    names = {n.replace("_", " ").casefold() for n in namespace_names if n}
    if head in names:
        return rest.strip()
    return title


def format_list(titles: Iterable[str]) -> str:
    """Format titles as a wikitext bullet list of colon links."""
    return "\n".join(f"*[[:{title}]]" for title in titles)


def parse_list(text: str) -> list[str]:
    """
    Extract the link targets from wikitext, in order.

    Args:
        text: Wikitext such as a bulleted list of [[User:Foo]] links

    Returns:
        Link titles with any leading colon, section or label removed
    """
    titles = [match.strip() for match in LINK_TITLE.findall(text)]
    return [title for title in titles if title]
