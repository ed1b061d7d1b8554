"""
Cross-wiki contribution surveys for Wikimedia wikis.

Provides:
- WikiAPI: MediaWiki API session for one wiki
- WikiFarm: Shared sessions and global user info lookups
- ContributionSurveyor: Per-wiki contribution survey formatted as wikitext
- run: The whole survey, from usernames to report file
- setup_logging: Logging configuration for console and file output
"""

from xwiki_survey.config import SurveyConfig, load_config
from xwiki_survey.farm import WikiFarm
from xwiki_survey.logging_config import setup_logging, get_log_dir
from xwiki_survey.models import GlobalUserInfo, Revision, WikiAccount
from xwiki_survey.survey import drop_locked_users, resolve_users, resolve_wikis, run, write_report
from xwiki_survey.surveyor import ContributionSurveyor
from xwiki_survey.wiki_api import WikiAPI, WikiAPIError
from xwiki_survey.wikitext import rewrite_links, wiki_prefix

__all__ = [
    "ContributionSurveyor",
    "GlobalUserInfo",
    "Revision",
    "SurveyConfig",
    "WikiAPI",
    "WikiAPIError",
    "WikiAccount",
    "WikiFarm",
    "drop_locked_users",
    "get_log_dir",
    "load_config",
    "resolve_users",
    "resolve_wikis",
    "rewrite_links",
    "run",
    "setup_logging",
    "wiki_prefix",
    "write_report",
]
