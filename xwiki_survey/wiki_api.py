#!/usr/bin/env python3
"""
Wiki API client for cross-wiki contribution surveys.

Provides the MediaWiki API calls the survey needs, one session per wiki:
- Rate-limited requests with optional retries
- Continued queries as generators
- Namespace lookup and title normalization
- Category members, page text, log entries, user contributions and uploads

Usage:
    from xwiki_survey.wiki_api import WikiAPI

    api = WikiAPI("en.wikipedia.org", delay=1)
    members = api.get_category_members("Wikipedia sockpuppets of Example", [2])
"""

import logging
import time
from typing import Iterator, Optional

import requests

from xwiki_survey.models import Revision
from xwiki_survey.wikitext import strip_namespace

MAIN_NAMESPACE = 0
USER_NAMESPACE = 2
CATEGORY_NAMESPACE = 14

DEFAULT_USER_AGENT = "xwiki-survey/1.0 (cross-wiki contribution surveys)"


class WikiAPIError(Exception):
    """Raised when an API call fails or returns an error object."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


class WikiAPI:
    """MediaWiki API session scoped to a single wiki."""

    def __init__(
        self,
        hostname: str,
        api_path: str = "/w/api.php",
        delay: float = 1.0,
        timeout: float = 30.0,
        max_retries: int = 1,
        retry_delay: float = 5.0,
        user_agent: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the Wiki API client.

        Args:
            hostname: Wiki hostname (e.g., en.wikipedia.org)
            api_path: Path of api.php on that host
            delay: Seconds to wait between requests (be polite)
            timeout: Request timeout in seconds
            max_retries: Number of attempts per request (1 = no retry)
            retry_delay: Seconds to wait between attempts
            user_agent: Custom user agent string
            logger: Logger instance (creates one if not provided)
        """
        self.hostname = hostname
        self.api_url = f"https://{hostname}{api_path}"
        self.delay = delay
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay
        self._namespaces: Optional[dict[int, list[str]]] = None

        self.logger = logger or logging.getLogger(f"xwiki_survey.wiki_api.{hostname}")

        self.session = requests.Session()
        self.session.headers.update({
            "User-Agent": user_agent or DEFAULT_USER_AGENT,
            "Accept": "application/json",
        })

    def __repr__(self) -> str:
        return f"WikiAPI({self.hostname!r})"

    def request(self, params: dict, description: str = "API request") -> dict:
        """
        Make an API request with rate limiting.

        Args:
            params: Query parameters for the API call
            description: Human-readable description for logging

        Returns:
            JSON response as dict

        Raises:
            WikiAPIError: if every attempt failed or the API returned an error
        """
        params["format"] = "json"
        params["formatversion"] = "2"

        last_error = None
        for attempt in range(self.max_retries):
            try:
                time.sleep(self.delay)  # Rate limiting
                response = self.session.get(
                    self.api_url,
                    params=params,
                    timeout=self.timeout,
                )
                response.raise_for_status()
                data = response.json()
                break

            except (requests.RequestException, ValueError) as e:
                last_error = e
                self.logger.warning(
                    f"Attempt {attempt + 1}/{self.max_retries} failed for {description}: {e}"
                )
                if attempt < self.max_retries - 1:
                    time.sleep(self.retry_delay)
        else:
            self.logger.error(f"FAILED after {self.max_retries} attempts: {description}")
            raise WikiAPIError(f"{self.hostname}: {description} failed: {last_error}") from last_error

        if "error" in data:
            error = data["error"]
            code = error.get("code")
            info = error.get("info", "unknown error")
            self.logger.error(f"API error for {description}: [{code}] {info}")
            raise WikiAPIError(f"{self.hostname}: {description}: [{code}] {info}", code=code)

        for warning in data.get("warnings", {}).values():
            self.logger.debug(f"API warning for {description}: {warning}")

        return data

    def query_all(
        self,
        params: dict,
        result_key: str,
        description: str = "API query",
    ) -> Iterator[dict]:
        """
        Iterate over every result of a continued `action=query` call.

        Args:
            params: Query parameters (action=query is added)
            result_key: Key under "query" holding the result list
            description: Human-readable description for logging

        Yields:
            Result items, across all continuation batches
        """
        params = {"action": "query", **params}
        cont: dict = {}

        while True:
            data = self.request({**params, **cont}, description)
            batch = data.get("query", {}).get(result_key, [])
            self.logger.debug(f"Retrieved {len(batch)} items for {description}")
            yield from batch

            if "continue" in data:
                cont = data["continue"]
            else:
                break

    def get_namespaces(self) -> dict[int, list[str]]:
        """
        Fetch namespace names and aliases from the wiki.

        Returns:
            Mapping of namespace ID to every name it is known by
        """
        if self._namespaces is not None:
            return self._namespaces

        data = self.request(
            {
                "action": "query",
                "meta": "siteinfo",
                "siprop": "namespaces|namespacealiases",
            },
            "fetching namespaces",
        )
        query = data.get("query", {})

        namespaces: dict[int, list[str]] = {}
        for ns in query.get("namespaces", {}).values():
            names = [ns.get("name", "")]
            if ns.get("canonical") and ns["canonical"] not in names:
                names.append(ns["canonical"])
            namespaces[int(ns["id"])] = names
        for alias in query.get("namespacealiases", []):
            namespaces.setdefault(int(alias["id"]), []).append(alias["alias"])

        self.logger.debug(f"Found {len(namespaces)} namespaces")
        self._namespaces = namespaces
        return namespaces

    def namespace_names(self, ns_id: int) -> list[str]:
        """All names of a namespace (local name, canonical name, aliases)."""
        return self.get_namespaces().get(ns_id, [])

    def remove_namespace(self, title: str, ns_id: Optional[int] = None) -> str:
        """
        Strip the namespace prefix from a title.

        Args:
            title: Page title (e.g., "User:Foo")
            ns_id: Only strip this namespace (None = any non-main namespace)

        Returns:
            Title without its namespace prefix
        """
        if ns_id is not None:
            return strip_namespace(title, self.namespace_names(ns_id))

        names = [
            name
            for nid, ns_names in self.get_namespaces().items()
            if nid != MAIN_NAMESPACE
            for name in ns_names
        ]
        return strip_namespace(title, names)

    def get_category_members(
        self,
        category: str,
        namespaces: Optional[list[int]] = None,
        recursive: bool = False,
    ) -> list[str]:
        """
        Fetch the titles of the pages in a category.

        Args:
            category: Category name, with or without the "Category:" prefix
            namespaces: Namespace IDs to keep (None = all namespaces)
            recursive: Whether to descend into subcategories

        Returns:
            List of page titles, in API order, subcategories visited once
        """
        category = strip_namespace(category, self.namespace_names(CATEGORY_NAMESPACE) or ["Category"])
        self.logger.info(f"Fetching members of Category:{category} (recursive={recursive})")

        members: list[str] = []
        seen: set[str] = set()
        self._collect_category_members(category, namespaces, recursive, members, seen)

        self.logger.info(f"Total category members found: {len(members)}")
        return members

    def _collect_category_members(self, category, namespaces, recursive, members, seen):
        if category in seen:
            return
        seen.add(category)

        params = {
            "list": "categorymembers",
            "cmtitle": f"Category:{category}",
            "cmlimit": "max",
            "cmprop": "title|ns",
        }
        if namespaces is not None:
            wanted = set(namespaces)
            if recursive:
                wanted.add(CATEGORY_NAMESPACE)
            params["cmnamespace"] = "|".join(str(ns) for ns in sorted(wanted))

        subcategories = []
        for member in self.query_all(params, "categorymembers", f"members of Category:{category}"):
            ns = member.get("ns", MAIN_NAMESPACE)
            if namespaces is None or ns in namespaces:
                members.append(member["title"])
            if recursive and ns == CATEGORY_NAMESPACE:
                subcategories.append(self.remove_namespace(member["title"], CATEGORY_NAMESPACE))

        for subcategory in subcategories:
            self._collect_category_members(subcategory, namespaces, recursive, members, seen)

    def get_user_contribs(
        self,
        user: str,
        namespaces: Optional[list[int]] = None,
        new_only: bool = False,
        ignore_minor: bool = False,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> list[Revision]:
        """
        Fetch the live contributions of a user.

        Args:
            user: Username without namespace prefix
            namespaces: Namespace IDs to include (None = all namespaces)
            new_only: Only edits that created a page
            ignore_minor: Skip edits marked minor
            start: Latest ISO timestamp to include (None = now)
            end: Earliest ISO timestamp to include (None = account creation)

        Returns:
            List of Revision objects, newest first, hidden revisions excluded
        """
        params = {
            "list": "usercontribs",
            "ucuser": user,
            "uclimit": "max",
            "ucprop": "ids|title|timestamp|size|sizediff|flags|comment",
        }
        if namespaces is not None:
            params["ucnamespace"] = "|".join(str(ns) for ns in namespaces)
        show = []
        if new_only:
            show.append("new")
        if ignore_minor:
            show.append("!minor")
        if show:
            params["ucshow"] = "|".join(show)
        if start:
            params["ucstart"] = start
        if end:
            params["ucend"] = end

        revisions = []
        for contrib in self.query_all(params, "usercontribs", f"contributions of {user}"):
            if contrib.get("texthidden") or contrib.get("suppressed"):
                continue
            revisions.append(Revision.from_api(contrib))

        self.logger.debug(f"{user} has {len(revisions)} matching contributions on {self.hostname}")
        return revisions

    def get_uploads(self, user: str) -> list[str]:
        """
        Fetch the titles of files uploaded by a user.

        Args:
            user: Username without namespace prefix

        Returns:
            List of file titles from the upload log, duplicates removed
        """
        params = {
            "list": "logevents",
            "letype": "upload",
            "leuser": user,
            "lelimit": "max",
            "leprop": "title",
        }
        titles = [
            entry["title"]
            for entry in self.query_all(params, "logevents", f"uploads of {user}")
            if "title" in entry
        ]
        return list(dict.fromkeys(titles))

    def get_user_editcount(self, user: str) -> Optional[int]:
        """
        Fetch the local edit count of a user.

        Returns:
            Edit count, or None if the user does not exist on this wiki
        """
        data = self.request(
            {
                "action": "query",
                "list": "users",
                "ususers": user,
                "usprop": "editcount",
            },
            f"edit count of {user}",
        )
        users = data.get("query", {}).get("users", [])
        if not users or users[0].get("missing") or users[0].get("invalid"):
            return None
        return users[0].get("editcount")

    def get_page_text(self, title: str) -> str:
        """
        Fetch the current wikitext of a page.

        Args:
            title: Page title

        Returns:
            Wikitext of the latest revision

        Raises:
            WikiAPIError: if the page does not exist
        """
        data = self.request(
            {
                "action": "query",
                "prop": "revisions",
                "titles": title,
                "rvprop": "content",
                "rvslots": "main",
            },
            f"text of {title}",
        )
        pages = data.get("query", {}).get("pages", [])
        if not pages or pages[0].get("missing") or not pages[0].get("revisions"):
            raise WikiAPIError(f"{self.hostname}: page {title} does not exist", code="missingtitle")
        return pages[0]["revisions"][0]["slots"]["main"].get("content", "")

    def get_log_entries(
        self,
        log_type: str,
        title: Optional[str] = None,
        limit: int = 1,
    ) -> list[dict]:
        """
        Fetch the most recent log entries of a type.

        Args:
            log_type: Log type (e.g., "globalauth", "upload")
            title: Only entries targeting this title
            limit: Maximum number of entries, newest first

        Returns:
            List of log entry dicts (title, timestamp, action, user, ...)
        """
        params = {
            "action": "query",
            "list": "logevents",
            "letype": log_type,
            "lelimit": str(limit),
            "leprop": "title|type|user|timestamp|details",
        }
        if title:
            params["letitle"] = title
        data = self.request(params, f"{log_type} log entries for {title or 'all titles'}")
        return data.get("query", {}).get("logevents", [])
