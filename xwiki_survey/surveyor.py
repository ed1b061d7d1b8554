#!/usr/bin/env python3
"""
Contribution surveyor for a single wiki.

Collects the contributions of a list of users and formats them as wikitext
in the style used for contributor copyright investigations: one line per
page, listing diffs with their size.

Usage:
    from xwiki_survey.surveyor import ContributionSurveyor

    surveyor = ContributionSurveyor(api, comingle=True, new_only=True)
    for fragment in surveyor.output_contribution_survey(["Example"]):
        print(fragment)
"""

import logging
from datetime import datetime, timezone
from typing import Iterable, Iterator, Optional

from xwiki_survey.models import Revision
from xwiki_survey.wiki_api import MAIN_NAMESPACE, USER_NAMESPACE, WikiAPI
from xwiki_survey.wikitext import format_list

API_TIMESTAMP = "%Y-%m-%dT%H:%M:%SZ"


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def format_diff(revision: Revision) -> str:
    """Format a revision as a {{dif}} template call, e.g. {{dif|123|(+450)}}."""
    size = f"+{revision.sizediff}" if revision.sizediff > 0 else str(revision.sizediff)
    return f"{{{{dif|{revision.revid}|({size})}}}}"


def format_page_entry(title: str, revisions: list[Revision]) -> str:
    """Format one surveyed page: link, edit count, and every diff."""
    diffs = "".join(format_diff(r) for r in revisions)
    return f"*[[:{title}]] ({_plural(len(revisions), 'edit')}): {diffs}"


def default_footer() -> str:
    """Footer noting when the report was generated."""
    now = datetime.now(timezone.utc)
    return f"This report generated by xwiki-survey on {now:%H:%M:%S %d %B %Y} (UTC)."


def _added(revisions: list[Revision]) -> int:
    return sum(r.sizediff for r in revisions if r.sizediff > 0)


class ContributionSurveyor:
    """Surveys the contributions of users on one wiki."""

    def __init__(
        self,
        wiki: WikiAPI,
        commons: Optional[WikiAPI] = None,
        comingle: bool = False,
        new_only: bool = False,
        ignore_minor_edits: bool = True,
        min_size_diff: int = 150,
        earliest: Optional[datetime] = None,
        latest: Optional[datetime] = None,
        page_size: int = 1000,
        footer: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the surveyor.

        Args:
            wiki: Session for the wiki to survey
            commons: Session for Commons, needed to survey Commons uploads
            comingle: Merge all users' contributions into one listing
            new_only: Only survey edits that created a page
            ignore_minor_edits: Skip edits marked minor
            min_size_diff: Skip edits that added fewer bytes than this
            earliest: Skip edits before this time
            latest: Skip edits after this time
            page_size: Maximum pages per comingled report fragment
            footer: Text closing the report (default: generation timestamp)
            logger: Logger instance (creates one if not provided)
        """
        if earliest and latest and earliest > latest:
            raise ValueError("earliest must not be after latest")
        if page_size < 1:
            raise ValueError("page_size must be positive")

        self.wiki = wiki
        self.commons = commons
        self.comingle = comingle
        self.new_only = new_only
        self.ignore_minor_edits = ignore_minor_edits
        self.min_size_diff = min_size_diff
        self.earliest = earliest
        self.latest = latest
        self.page_size = page_size
        self.footer = footer
        self.logger = logger or logging.getLogger("xwiki_survey.surveyor")

    def _timestamp(self, value: Optional[datetime]) -> Optional[str]:
        if value is None:
            return None
        return value.astimezone(timezone.utc).strftime(API_TIMESTAMP)

    def _survey_user(self, user: str, namespaces: list[int]) -> dict[str, list[Revision]]:
        revisions = self.wiki.get_user_contribs(
            user,
            namespaces,
            new_only=self.new_only,
            ignore_minor=self.ignore_minor_edits,
            start=self._timestamp(self.latest),
            end=self._timestamp(self.earliest),
        )
        pages: dict[str, list[Revision]] = {}
        for revision in revisions:
            if revision.sizediff < self.min_size_diff:
                continue
            pages.setdefault(revision.title, []).append(revision)
        return pages

    def contribution_survey(
        self,
        users: Iterable[str],
        namespaces: Iterable[int] = (MAIN_NAMESPACE,),
    ) -> dict[str, dict[str, list[Revision]]]:
        """
        Survey the contributions of several users.

        Args:
            users: Usernames; repeats are surveyed once
            namespaces: Namespace IDs to survey

        Returns:
            Mapping of user -> page title -> surveyed revisions
        """
        namespaces = list(namespaces)
        results = {}
        for user in dict.fromkeys(users):
            results[user] = self._survey_user(user, namespaces)
            self.logger.debug(f"{user}: {len(results[user])} pages on {self.wiki.hostname}")
        return results

    def output_contribution_survey(
        self,
        users: Iterable[str],
        images: bool = False,
        commons: bool = False,
        userspace: bool = False,
        namespaces: Iterable[int] = (MAIN_NAMESPACE,),
    ) -> Iterator[str]:
        """
        Survey users and format the results as wikitext.

        Args:
            users: Usernames; repeats are surveyed once
            images: Also list files uploaded locally
            commons: Also list files uploaded to Commons
            userspace: Also list userspace pages edited
            namespaces: Namespace IDs to survey

        Yields:
            Wikitext report fragments; the last one carries the footer.
            Nothing is yielded when there is nothing to report.
        """
        if commons and self.commons is None:
            raise ValueError("Surveying Commons uploads needs a Commons session")

        users = list(dict.fromkeys(users))
        namespaces = list(namespaces)
        if self.comingle:
            fragments = self._comingled_fragments(users, images, commons, userspace, namespaces)
        else:
            fragments = self._user_fragments(users, images, commons, userspace, namespaces)

        # Hold back one fragment so the footer can be attached to the last
        previous = None
        for fragment in fragments:
            if previous is not None:
                yield previous
            previous = fragment
        if previous is not None:
            yield f"{previous}\n\n{self._footer()}"

    def _footer(self) -> str:
        return default_footer() if self.footer is None else self.footer

    def _heading(self) -> str:
        return "Pages created" if self.new_only else "Mainspace edits"

    def _page_lines(self, pages: dict[str, list[Revision]]) -> list[str]:
        ordered = sorted(pages.items(), key=lambda item: (-_added(item[1]), item[0]))
        return [format_page_entry(title, revisions) for title, revisions in ordered]

    def _comingled_fragments(self, users, images, commons, userspace, namespaces) -> Iterator[str]:
        merged: dict[str, list[Revision]] = {}
        for pages in self.contribution_survey(users, namespaces).values():
            for title, revisions in pages.items():
                merged.setdefault(title, []).extend(revisions)

        lines = self._page_lines(merged)
        self.logger.info(f"{self.wiki.hostname}: {len(lines)} pages surveyed for {len(users)} users")

        for start in range(0, len(lines), self.page_size):
            chunk = lines[start:start + self.page_size]
            heading = f"=== {self._heading()}: pages {start + 1} to {start + len(chunk)} ==="
            yield "\n".join([heading] + chunk)

        extras = [
            section
            for user in users
            for section in self._extra_sections(user, images, commons, userspace)
        ]
        if extras:
            yield "\n\n".join(extras)

    def _user_fragments(self, users, images, commons, userspace, namespaces) -> Iterator[str]:
        for user in users:
            pages = self._survey_user(user, namespaces)
            editcount = self.wiki.get_user_editcount(user)

            lines = [f"=== {user} ===", f"*{{{{user5|{user}}}}}"]
            if editcount is None:
                self.logger.warning(f"{user} is not a registered user on {self.wiki.hostname}")
            else:
                lines.append(f"*Total edits: {editcount}, pages surveyed: {len(pages)}")
            lines.append(f"*[[Special:Contributions/{user}]]")
            lines.append("")
            lines.append(f"==== {self._heading()} ({user}) ====")
            lines.extend(self._page_lines(pages) or ["No major contributions."])

            sections = ["\n".join(lines)]
            sections.extend(self._extra_sections(user, images, commons, userspace))
            yield "\n\n".join(sections)

    def _extra_sections(self, user, images, commons, userspace) -> list[str]:
        sections = []
        if userspace:
            titles = [r.title for r in self.wiki.get_user_contribs(user, [USER_NAMESPACE])]
            body = format_list(dict.fromkeys(titles)) or "No userspace edits."
            sections.append(f"==== Userspace edits ({user}) ====\n{body}")
        if images:
            uploads = self.wiki.get_uploads(user)
            if uploads:
                sections.append(f"==== Local uploads ({user}) ====\n{format_list(uploads)}")
        if commons:
            uploads = self.commons.get_uploads(user)
            if uploads:
                body = "\n".join(f"*[[:commons:{title}]]" for title in uploads)
                sections.append(f"==== Commons uploads ({user}) ====\n{body}")
        return sections
