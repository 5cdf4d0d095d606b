"""
Data loaders for the Projects and Hackathon Timeline windows.

Each loader drives one list view through a fixed sequence:

1. loading indicator on, error hidden, list cleared
2. fetch raw text (local cache file or HTTP)
3. decode with ``LooseJsonListDecoder`` and post-process with ``ListQuery``
4. render items, or show a user-facing error message

The loading indicator is always cleared, whichever branch is taken.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

import aiofiles

from portfolios.core.config_manager import ConfigManager, get_config_manager
from portfolios.core.logging_utils import get_module_logger

from .fetch import HttpFetcher
from .list_query import ListQuery, Paginator
from .loose_json import LooseJsonListDecoder
from .records import GitHubRepo, HackathonEvent

GITHUB_REPOS_URL = "https://api.github.com/users/{user}/repos?per_page=100&sort=updated"
DEFAULT_TIMELINE_URL = "https://code-snip.vercel.app/raw/101"

DEFAULT_PINNED_REPOS: Tuple[str, ...] = (
    "Voyage3",
    "RunFT",
    "Accident-Analysis-Dashboard",
    "CatchPhish",
    "Cultur.AI",
    "Heart-Quake",
)

PROJECTS_CACHE_ERROR = "Failed to load projects from cache."
PROJECTS_NETWORK_ERROR = "Failed to load projects. Please check your internet connection."
PROJECTS_PARSE_ERROR = "Error parsing project data"
TIMELINE_NETWORK_ERROR = "Failed to load timeline. Please check your internet connection."
TIMELINE_PARSE_ERROR = "Error parsing timeline data"


class ListView(Protocol):
    def set_loading(self, loading: bool) -> None: ...

    def show_error(self, message: str) -> None: ...

    def hide_error(self) -> None: ...

    def clear(self) -> None: ...

    def add_item(self, record: Any) -> None: ...

    def set_load_more(self, visible: bool, remaining: int = 0) -> None: ...


def load_more_label(remaining: int) -> str:
    return f"Load More ({remaining} remaining)"


# =============================================================================
# Projects
# =============================================================================


@dataclass
class ProjectsConfig:
    github_username: str = "altf4-games"
    max_projects: int = 10
    exclude_forks: bool = True
    sort_by_stars: bool = True
    show_only_pinned: bool = False
    pinned_repos: Tuple[str, ...] = DEFAULT_PINNED_REPOS
    use_local_cache: bool = True
    cache_path: Optional[Path] = None
    user_agent: str = "PortfoliOS"

    @classmethod
    def from_config(cls, config: Dict[str, str], manager: Optional[ConfigManager] = None) -> "ProjectsConfig":
        cm = manager or get_config_manager()
        d = cls()
        cache = cm.get_str(config, "projects.cache_path", "")
        pinned = cm.get_list(config, "projects.pinned_repos")
        return cls(
            github_username=cm.get_str(config, "projects.github_username", d.github_username),
            max_projects=cm.get_int(config, "projects.max_projects", d.max_projects),
            exclude_forks=cm.get_bool(config, "projects.exclude_forks", d.exclude_forks),
            sort_by_stars=cm.get_bool(config, "projects.sort_by_stars", d.sort_by_stars),
            show_only_pinned=cm.get_bool(config, "projects.show_only_pinned", d.show_only_pinned),
            pinned_repos=tuple(pinned) if pinned else d.pinned_repos,
            use_local_cache=cm.get_bool(config, "projects.use_local_cache", d.use_local_cache),
            cache_path=Path(cache).expanduser() if cache else None,
            user_agent=cm.get_str(config, "projects.user_agent", d.user_agent),
        )

    @property
    def api_url(self) -> str:
        return GITHUB_REPOS_URL.format(user=self.github_username)

    def query(self) -> ListQuery:
        return ListQuery(
            exclude=(lambda repo: repo.fork) if self.exclude_forks else None,
            allow_list=self.pinned_repos if self.show_only_pinned else None,
            sort_key=(lambda repo: repo.stargazers_count) if self.sort_by_stars else None,
            descending=True,
            limit=self.max_projects,
        )


class ProjectsLoader:

    def __init__(self, config: ProjectsConfig, fetcher: HttpFetcher, view: ListView):
        self.logger = get_module_logger("ProjectsLoader")
        self.config = config
        self.fetcher = fetcher
        self.view = view
        self.decoder = LooseJsonListDecoder(GitHubRepo)
        self.repositories: List[GitHubRepo] = []

    def _cache_available(self) -> bool:
        path = self.config.cache_path
        return self.config.use_local_cache and path is not None and path.is_file()

    async def load(self) -> List[GitHubRepo]:
        self.view.set_loading(True)
        self.view.hide_error()
        self.view.clear()
        self.repositories = []

        try:
            if self._cache_available():
                await self._load_from_cache()
            else:
                await self._load_from_github()
        finally:
            self.view.set_loading(False)
        return list(self.repositories)

    async def _load_from_cache(self) -> None:
        path = self.config.cache_path
        try:
            async with aiofiles.open(path, "r", encoding="utf-8") as handle:
                raw = await handle.read()
            self.logger.debug("Loading from cache %s (%d chars)", path, len(raw))
            self.repositories = self.config.query().apply(self.decoder.decode(raw))
        except (OSError, UnicodeDecodeError, ValueError) as exc:
            self.logger.error("Error loading cached projects from %s: %s", path, exc)
            self.view.show_error(PROJECTS_CACHE_ERROR)
            return

        self._render()
        self.logger.info("Loaded %d projects from cache", len(self.repositories))

    async def _load_from_github(self) -> None:
        result = await self.fetcher.fetch_text(
            self.config.api_url,
            headers={"User-Agent": self.config.user_agent},
        )
        if not result.success:
            self.logger.error("Failed to fetch GitHub projects: %s", result.error)
            self.view.show_error(PROJECTS_NETWORK_ERROR)
            return

        try:
            self.repositories = self.config.query().apply(self.decoder.decode(result.text))
        except (TypeError, ValueError) as exc:
            self.logger.error("Error parsing GitHub data: %s", exc)
            self.view.show_error(PROJECTS_PARSE_ERROR)
            return

        self._render()
        self.logger.info("Loaded %d projects from GitHub", len(self.repositories))

    def _render(self) -> None:
        for repo in self.repositories:
            self.view.add_item(repo)

    # Toggles, each followed by a reload

    async def set_exclude_forks(self, exclude: bool) -> List[GitHubRepo]:
        self.config.exclude_forks = exclude
        return await self.load()

    async def set_show_only_pinned(self, pinned: bool) -> List[GitHubRepo]:
        self.config.show_only_pinned = pinned
        return await self.load()

    async def set_sort_by_stars(self, sort: bool) -> List[GitHubRepo]:
        self.config.sort_by_stars = sort
        return await self.load()


# =============================================================================
# Hackathon timeline
# =============================================================================


@dataclass
class TimelineConfig:
    timeline_url: str = DEFAULT_TIMELINE_URL
    reverse_order: bool = False
    use_pagination: bool = False
    items_per_page: int = 5

    @classmethod
    def from_config(cls, config: Dict[str, str], manager: Optional[ConfigManager] = None) -> "TimelineConfig":
        cm = manager or get_config_manager()
        d = cls()
        items_per_page = cm.get_int(config, "timeline.items_per_page", d.items_per_page)
        return cls(
            timeline_url=cm.get_str(config, "timeline.url", d.timeline_url),
            reverse_order=cm.get_bool(config, "timeline.reverse_order", d.reverse_order),
            use_pagination=cm.get_bool(config, "timeline.use_pagination", d.use_pagination),
            items_per_page=items_per_page if items_per_page > 0 else d.items_per_page,
        )


class TimelineLoader:

    def __init__(self, config: TimelineConfig, fetcher: HttpFetcher, view: ListView):
        self.logger = get_module_logger("TimelineLoader")
        self.config = config
        self.fetcher = fetcher
        self.view = view
        self.decoder = LooseJsonListDecoder(HackathonEvent)
        self.events: List[HackathonEvent] = []
        self.paginator: Paginator[HackathonEvent] = Paginator([], config.items_per_page, config.use_pagination)

    async def load(self) -> List[HackathonEvent]:
        """Fetch, decode and render the first page; returns the rendered events."""
        self.view.set_loading(True)
        self.view.hide_error()
        self.view.clear()

        try:
            result = await self.fetcher.fetch_text(self.config.timeline_url, cache_bust=True)
        finally:
            self.view.set_loading(False)

        if not result.success:
            self.logger.error("Failed to fetch hackathon timeline: %s", result.error)
            self.view.show_error(TIMELINE_NETWORK_ERROR)
            return []

        try:
            events = ListQuery(reverse=self.config.reverse_order).apply(self.decoder.decode(result.text))
        except (TypeError, ValueError) as exc:
            self.logger.error("Error parsing hackathon data: %s", exc)
            self.view.show_error(TIMELINE_PARSE_ERROR)
            return []

        self.events = events
        self.paginator = Paginator(events, self.config.items_per_page, self.config.use_pagination)
        shown = self._render(self.paginator.page_items())
        self.logger.info("Loaded %d hackathon events", len(events))
        return shown

    def _render(self, events: Sequence[HackathonEvent]) -> List[HackathonEvent]:
        for event in events:
            self.view.add_item(event)
        self._update_load_more()
        return list(events)

    def _update_load_more(self) -> None:
        has_more = self.paginator.has_more()
        self.view.set_load_more(has_more, self.paginator.remaining() if has_more else 0)

    def load_more(self) -> List[HackathonEvent]:
        if not self.config.use_pagination:
            return []
        return self._render(self.paginator.load_more())

    def show_all(self) -> List[HackathonEvent]:
        self.config.use_pagination = False
        self.view.clear()
        return self._render(self.paginator.show_all())

    async def set_reverse_order(self, reverse: bool) -> List[HackathonEvent]:
        self.config.reverse_order = reverse
        return await self.load()

    def event_count(self) -> int:
        return len(self.events)


__all__ = [
    "ListView",
    "load_more_label",
    "ProjectsConfig",
    "ProjectsLoader",
    "TimelineConfig",
    "TimelineLoader",
    "PROJECTS_CACHE_ERROR",
    "PROJECTS_NETWORK_ERROR",
    "PROJECTS_PARSE_ERROR",
    "TIMELINE_NETWORK_ERROR",
    "TIMELINE_PARSE_ERROR",
]
