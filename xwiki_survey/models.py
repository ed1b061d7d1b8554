#!/usr/bin/env python3
"""
Typed records returned by the wiki API helpers.

Global user info is split into its scalar fields and an explicit mapping of
per-wiki accounts, so callers never need to inspect value types.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


def parse_timestamp(value: str) -> datetime:
    """
    Parse an API or command-line timestamp.

    Accepts ISO 8601 dates and times, with or without a trailing "Z"
    (e.g., "2021-08-21" or "2021-08-21T12:00:00Z"). Times without a zone are
    taken as UTC.

    Raises:
        ValueError: if the value is not a valid timestamp
    """
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class WikiAccount:
    """One attached account from a global user info lookup."""

    wiki: str
    url: str
    editcount: int = 0
    registration: Optional[str] = None
    blocked: bool = False

    @property
    def hostname(self) -> str:
        """Bare hostname, e.g. "de.wikipedia.org"."""
        return self.url.replace("https://", "").replace("http://", "").rstrip("/")

    @classmethod
    def from_api(cls, data: dict) -> "WikiAccount":
        return cls(
            wiki=data.get("wiki", ""),
            url=data.get("url", ""),
            editcount=int(data.get("editcount", 0)),
            registration=data.get("registration") or None,
            blocked="blocked" in data,
        )


@dataclass
class GlobalUserInfo:
    """Cross-wiki account metadata for a single username."""

    name: str
    home: Optional[str] = None
    registration: Optional[str] = None
    locked: bool = False
    groups: list[str] = field(default_factory=list)
    rights: list[str] = field(default_factory=list)
    accounts: dict[str, WikiAccount] = field(default_factory=dict)

    @property
    def total_edits(self) -> int:
        return sum(account.editcount for account in self.accounts.values())

    def active_wikis(self) -> set[str]:
        """Hostnames of every attached account with at least one edit."""
        return {
            account.hostname
            for account in self.accounts.values()
            if account.editcount > 0
        }

    @classmethod
    def from_api(cls, data: dict) -> "GlobalUserInfo":
        """
        Build from a `meta=globaluserinfo` result (formatversion=2).

        Args:
            data: The `query.globaluserinfo` object

        Returns:
            GlobalUserInfo with one WikiAccount per merged account
        """
        accounts = {}
        for entry in data.get("merged", []):
            account = WikiAccount.from_api(entry)
            accounts[account.wiki or account.hostname] = account

        return cls(
            name=data.get("name", ""),
            home=data.get("home"),
            registration=data.get("registration"),
            locked=bool(data.get("locked", False)),
            groups=list(data.get("groups", [])),
            rights=list(data.get("rights", [])),
            accounts=accounts,
        )


@dataclass(frozen=True)
class Revision:
    """A single contribution as returned by `list=usercontribs`."""

    revid: int
    title: str
    timestamp: str
    user: str
    size: int = 0
    sizediff: int = 0
    minor: bool = False
    new: bool = False
    comment: str = ""

    @classmethod
    def from_api(cls, data: dict) -> "Revision":
        return cls(
            revid=int(data["revid"]),
            title=data["title"],
            timestamp=data.get("timestamp", ""),
            user=data.get("user", ""),
            size=int(data.get("size", 0)),
            sizediff=int(data.get("sizediff", 0)),
            minor=bool(data.get("minor", False)),
            new=bool(data.get("new", False)),
            comment=data.get("comment", ""),
        )
