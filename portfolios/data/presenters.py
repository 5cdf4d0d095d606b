"""Turn decoded records into display captions for list items."""

from __future__ import annotations

from typing import Dict, Optional

from .records import GitHubRepo, HackathonEvent

DEFAULT_LANGUAGE_COLOR = "#cccccc"

# GitHub linguist colours, keyed by lower-cased language name.
LANGUAGE_COLORS: Dict[str, str] = {
    "c#": "#178600",
    "javascript": "#f1e05a",
    "typescript": "#2b7489",
    "python": "#3572A5",
    "c++": "#f34b7d",
    "c": "#555555",
    "css": "#563d7c",
    "html": "#e34c26",
    "java": "#b07219",
    "jupyter notebook": "#DA5B0B",
}


def format_project_name(name: str) -> str:
    """``"heart-quake_game"`` -> ``"Heart Quake Game"``.

    Only the first letter of each word is upper-cased; the rest is kept.
    """
    words = name.replace("-", " ").replace("_", " ").split(" ")
    return " ".join(word[:1].upper() + word[1:] for word in words)


def language_color(language: Optional[str]) -> Optional[str]:
    if not language:
        return None
    return LANGUAGE_COLORS.get(language.lower(), DEFAULT_LANGUAGE_COLOR)


def describe_repo(repo: GitHubRepo) -> Dict[str, str]:
    caption = {
        "title": format_project_name(repo.name),
        "description": repo.description or "No description available",
        "language": f"Language: {repo.language}" if repo.language else "Language: Unknown",
        "stars": f"Stars: {repo.stargazers_count}",
        "forks": f"Forks: {repo.forks_count}",
        "url": repo.html_url,
    }
    color = language_color(repo.language)
    if color is not None:
        caption["language_color"] = color
    return caption


def describe_event(event: HackathonEvent) -> Dict[str, str]:
    caption = {
        "title": event.name,
        "date": event.date,
        "description": event.description,
        "location": event.location or "",
    }
    if event.links.github:
        caption["github"] = event.links.github
    url, label = event.links.project_link()
    if url:
        caption["project_url"] = url
        caption["project_label"] = label
    return caption


__all__ = [
    "LANGUAGE_COLORS",
    "DEFAULT_LANGUAGE_COLOR",
    "format_project_name",
    "language_color",
    "describe_repo",
    "describe_event",
]
