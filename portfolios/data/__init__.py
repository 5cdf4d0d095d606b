from .fetch import FetchResult, HttpFetcher, cache_busted
from .list_query import ListQuery, Paginator
from .loaders import ListView, ProjectsConfig, ProjectsLoader, TimelineConfig, TimelineLoader
from .loose_json import LooseJsonListDecoder, decode_records, split_candidates
from .records import GitHubRepo, HackathonEvent, HackathonLinks, JsonRecord, RecordDecodeError

__all__ = [
    'FetchResult',
    'HttpFetcher',
    'cache_busted',
    'ListQuery',
    'Paginator',
    'ListView',
    'ProjectsConfig',
    'ProjectsLoader',
    'TimelineConfig',
    'TimelineLoader',
    'LooseJsonListDecoder',
    'decode_records',
    'split_candidates',
    'GitHubRepo',
    'HackathonEvent',
    'HackathonLinks',
    'JsonRecord',
    'RecordDecodeError',
]
