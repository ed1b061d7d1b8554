#!/usr/bin/env python3
"""
Session factory for Wikimedia wikis.

Hands out one shared WikiAPI per hostname and performs the lookups that go
through Meta-Wiki rather than an individual wiki.

Usage:
    from xwiki_survey.farm import WikiFarm

    farm = WikiFarm(config)
    info = farm.get_global_user_info("Example")
    locked = farm.get_lock_timestamp("Example")
    enwiki = farm.session("en.wikipedia.org")
"""

import logging
from datetime import datetime
from typing import Optional

from xwiki_survey.config import SurveyConfig
from xwiki_survey.models import GlobalUserInfo, parse_timestamp
from xwiki_survey.wiki_api import WikiAPI


class WikiFarm:
    """Shared WikiAPI sessions keyed by hostname."""

    def __init__(self, config: SurveyConfig, logger: Optional[logging.Logger] = None):
        self.config = config
        self.logger = logger or logging.getLogger("xwiki_survey.farm")
        self._sessions: dict[str, WikiAPI] = {}
        self._global_info: dict[str, Optional[GlobalUserInfo]] = {}

    def session(self, hostname: str) -> WikiAPI:
        """Return the shared session for a wiki, creating it on first use."""
        if hostname not in self._sessions:
            self.logger.debug(f"Opening session for {hostname}")
            self._sessions[hostname] = WikiAPI(
                hostname,
                api_path=self.config.api_path,
                delay=self.config.delay,
                timeout=self.config.timeout,
                max_retries=self.config.max_retries,
                retry_delay=self.config.retry_delay,
                user_agent=self.config.user_agent,
                logger=logging.getLogger(f"xwiki_survey.wiki_api.{hostname}"),
            )
        return self._sessions[hostname]

    @property
    def home(self) -> WikiAPI:
        return self.session(self.config.home_wiki)

    @property
    def meta(self) -> WikiAPI:
        return self.session(self.config.meta_wiki)

    def get_global_user_info(self, username: str) -> Optional[GlobalUserInfo]:
        """
        Look up a user's attached accounts across all wikis.

        Args:
            username: Username without namespace prefix

        Returns:
            GlobalUserInfo, or None if the user has no global account
        """
        if username in self._global_info:
            return self._global_info[username]

        data = self.meta.request(
            {
                "action": "query",
                "meta": "globaluserinfo",
                "guiuser": username,
                "guiprop": "groups|merged|unattached|rights",
            },
            f"global user info for {username}",
        )
        info = data.get("query", {}).get("globaluserinfo", {})
        result = None if not info or info.get("missing") else GlobalUserInfo.from_api(info)
        self._global_info[username] = result
        return result

    def get_lock_timestamp(self, username: str) -> Optional[datetime]:
        """
        Find when a user's global account was last locked or unlocked.

        Args:
            username: Username without namespace prefix

        Returns:
            Time of the newest globalauth log entry, or None if there is none
        """
        entries = self.meta.get_log_entries("globalauth", f"User:{username}@global", limit=1)
        if not entries or not entries[0].get("timestamp"):
            return None
        return parse_timestamp(entries[0]["timestamp"])
