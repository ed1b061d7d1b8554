#!/usr/bin/env python3
"""
Cross-wiki contribution survey.

Surveys the page creations of a user (and optionally the members of a user
category) on every Wikimedia wiki where they have edits, and writes one
report with a section per wiki. Links in each section are prefixed with the
wiki's interwiki prefix so the report can be posted on the home wiki.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable, Iterator, Optional

from xwiki_survey.config import SurveyConfig
from xwiki_survey.farm import WikiFarm
from xwiki_survey.surveyor import ContributionSurveyor, default_footer
from xwiki_survey.wiki_api import MAIN_NAMESPACE, USER_NAMESPACE, WikiAPI
from xwiki_survey.wikitext import normalize_username, parse_list, rewrite_links, wiki_prefix

logger = logging.getLogger("xwiki_survey.survey")

HOME_WIKI = "en.wikipedia.org"


def resolve_users(
    home: WikiAPI,
    username: str,
    category: Optional[str] = None,
    wikipage: Optional[str] = None,
) -> list[str]:
    """
    Build the list of users to survey.

    Args:
        home: Session for the home wiki
        username: Primary user
        category: Category whose user pages are added (searched recursively)
        wikipage: Home wiki page whose linked users are added

    Returns:
        [username] followed by the category members and then the users
        linked from wikipage, namespace prefixes removed, in order;
        duplicates are kept
    """
    if not username or not username.strip():
        raise ValueError("A username is required")

    titles = [username]
    if category:
        titles.extend(home.get_category_members(category, [USER_NAMESPACE], recursive=True))
    if wikipage:
        listed = parse_list(home.get_page_text(wikipage))
        logger.info(f"{len(listed)} users listed on {wikipage}")
        titles.extend(listed)

    users = [normalize_username(home.remove_namespace(title, USER_NAMESPACE)) for title in titles]
    logger.info(f"Surveying {len(users)} users")
    return users


def drop_locked_users(farm: WikiFarm, users: Iterable[str], locked_after: datetime) -> list[str]:
    """
    Remove users who were globally locked before a date.

    A user is dropped when their global account is locked and the latest
    globalauth log entry for it is older than locked_after. Users locked
    since then, users who are not locked and users without a global
    account are kept.

    Returns:
        A new list; the input is not modified
    """
    kept = []
    for user in users:
        info = farm.get_global_user_info(user)
        if info is not None and info.locked:
            locked = farm.get_lock_timestamp(user)
            if locked is not None and locked < locked_after:
                logger.info(f"Skipping {user}: locked on {locked:%Y-%m-%d}")
                continue
        kept.append(user)
    return kept


def resolve_wikis(farm: WikiFarm, users: Iterable[str], home_wiki: str = HOME_WIKI) -> set[str]:
    """
    Find every wiki where at least one user has edits.

    Args:
        farm: Session factory used for the global user info lookups
        users: Users to look up
        home_wiki: Wiki that is always surveyed

    Returns:
        Set of hostnames, always including home_wiki
    """
    wikis = {home_wiki}
    for user in users:
        info = farm.get_global_user_info(user)
        if info is None:
            logger.warning(f"{user} has no global account; skipping wiki discovery")
            continue
        active = info.active_wikis()
        logger.debug(f"{user} has {info.total_edits} edits on {len(active)} wikis")
        wikis.update(active)

    logger.info(f"Wikis to survey: {len(wikis)}")
    return wikis


def survey_wiki(
    farm: WikiFarm,
    hostname: str,
    users: list[str],
    footer: Optional[str] = None,
) -> Iterator[str]:
    """
    Survey page creations on one wiki.

    Yields:
        Report fragments with links prefixed for the home wiki
    """
    surveyor = ContributionSurveyor(
        farm.session(hostname), comingle=True, new_only=True, footer=footer
    )
    prefix = wiki_prefix(hostname)
    for fragment in surveyor.output_contribution_survey(users, namespaces=[MAIN_NAMESPACE]):
        yield rewrite_links(fragment, prefix)


def write_report(
    path,
    farm: WikiFarm,
    users: list[str],
    wikis: Iterable[str],
    footer: Optional[str] = None,
) -> Path:
    """
    Survey every wiki and write the combined report.

    Args:
        path: Output file (created or truncated)
        farm: Session factory
        users: Users to survey
        wikis: Hostnames to survey
        footer: Text closing each non-empty section (default: generation timestamp)

    Returns:
        Path of the written report
    """
    path = Path(path)
    with open(path, "w", encoding="utf-8") as out:
        for hostname in wikis:
            logger.info(f"Surveying {hostname}...")
            out.write(f"=={hostname}==\n\n")
            for fragment in survey_wiki(farm, hostname, users, footer=footer):
                out.write(fragment)
                out.write("\n\n")

    logger.info(f"Report written to {path}")
    return path


def run(
    config: SurveyConfig,
    username: str,
    category: Optional[str] = None,
    outfile: Optional[str] = None,
    farm: Optional[WikiFarm] = None,
    wikipage: Optional[str] = None,
    locked_after: Optional[datetime] = None,
    footer: Optional[str] = None,
) -> Path:
    """
    Run the whole survey: resolve users, discover wikis, write the report.

    Args:
        config: Settings for sessions and output
        username: Primary user
        category: Optional category of users to add
        outfile: Output file (default: config.outfile)
        farm: Session factory (default: one built from config)
        wikipage: Optional home wiki page listing users to add
        locked_after: Drop users globally locked before this time
        footer: Footer for every wiki section (default: one timestamp for the run)

    Returns:
        Path of the written report
    """
    farm = farm or WikiFarm(config)
    users = resolve_users(farm.home, username, category, wikipage)
    if locked_after is not None:
        users = drop_locked_users(farm, users, locked_after)
    wikis = resolve_wikis(farm, users, config.home_wiki)
    footer = footer if footer is not None else default_footer()
    return write_report(outfile or config.outfile, farm, users, wikis, footer)
