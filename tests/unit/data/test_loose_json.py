"""Unit tests for the loose JSON list decoder and record decoding."""

import json

import pytest

from portfolios.data.loose_json import LooseJsonListDecoder, decode_records, split_candidates
from portfolios.data.records import GitHubRepo, HackathonEvent, HackathonLinks, RecordDecodeError


REPOS_JSON = json.dumps([
    {
        "name": "Voyage3",
        "description": "Space game",
        "html_url": "https://github.com/altf4-games/Voyage3",
        "language": "C#",
        "stargazers_count": 12,
        "forks_count": 2,
        "updated_at": "2024-05-01T10:00:00Z",
        "fork": False,
        "homepage": None,
        "owner": {"login": "altf4-games"},
    },
    {
        "name": "RunFT",
        "description": None,
        "html_url": "https://github.com/altf4-games/RunFT",
        "language": None,
        "stargazers_count": 3,
        "forks_count": 0,
        "fork": True,
    },
])


class TestSplitCandidates:

    def test_splits_top_level_objects(self):
        raw = '[{"a": 1}, {"b": {"c": 2}}]'
        assert split_candidates(raw) == ['{"a": 1}', '{"b": {"c": 2}}']

    def test_tolerates_trailing_comma_and_whitespace(self):
        raw = '  [\n  {"a": 1},\n  {"b": 2},\n]\n'
        assert split_candidates(raw) == ['{"a": 1}', '{"b": 2}']

    def test_unbalanced_tail_is_dropped(self):
        raw = '[{"a": 1}, {"b": 2'
        assert split_candidates(raw) == ['{"a": 1}']

    def test_stray_closing_brace_ignored(self):
        assert split_candidates('}{"a": 1}') == ['{"a": 1}']

    def test_without_brackets(self):
        assert split_candidates('{"a": 1} {"b": 2}') == ['{"a": 1}', '{"b": 2}']

    @pytest.mark.parametrize("raw", [None, "", "[]", "   ", "[ ]"])
    def test_empty_inputs(self, raw):
        assert split_candidates(raw) == []


class TestLooseJsonListDecoder:

    def test_decodes_well_formed_array(self):
        repos = LooseJsonListDecoder(GitHubRepo).decode(REPOS_JSON)

        assert [r.name for r in repos] == ["Voyage3", "RunFT"]
        first = repos[0]
        assert first.stargazers_count == 12
        assert first.language == "C#"
        assert first.homepage == ""
        assert first.fork is False
        assert repos[1].fork is True
        assert repos[1].description == ""
        assert repos[1].updated_at == ""

    def test_matches_strict_decoder_on_valid_input(self):
        strict = [GitHubRepo.from_mapping(item) for item in json.loads(REPOS_JSON)]
        assert LooseJsonListDecoder(GitHubRepo).decode(REPOS_JSON) == strict

    def test_skips_malformed_entry_and_keeps_rest(self, caplog):
        raw = '[{"name": "good"}, {"name": "bad",, }, {"name": "also-good"}]'

        records = decode_records(raw, GitHubRepo)

        assert [r.name for r in records] == ["good", "also-good"]
        assert any("Failed to parse GitHubRepo 1" in message for message in caplog.messages)

    def test_wrong_field_type_skips_entry(self):
        raw = '[{"name": "a", "stargazers_count": "many"}, {"name": "b", "stargazers_count": 4}]'
        records = decode_records(raw, GitHubRepo)
        assert [(r.name, r.stargazers_count) for r in records] == [("b", 4)]

    def test_unnamed_records_dropped(self):
        raw = '[{"name": ""}, {"description": "no name"}, {"name": "kept"}]'
        assert [r.name for r in decode_records(raw, GitHubRepo)] == ["kept"]

    def test_custom_key_field(self):
        raw = '[{"name": "x"}, {"name": "y", "html_url": "https://example.com"}]'
        records = decode_records(raw, GitHubRepo, key_field="html_url")
        assert [r.name for r in records] == ["y"]

    def test_truncated_feed_keeps_complete_entries(self):
        raw = '[{"name": "a"}, {"name": "b"}, {"name": "c", "descr'
        assert [r.name for r in decode_records(raw, GitHubRepo)] == ["a", "b"]

    def test_closing_brace_inside_string_breaks_entry(self):
        raw = '[{"name": "a", "description": "x}y"}, {"name": "b"}]'
        # The scan is not string-aware: "a" is cut at the quoted brace.
        assert [r.name for r in decode_records(raw, GitHubRepo)] == ["b"]

    def test_opening_brace_inside_string_swallows_rest(self):
        raw = '[{"name": "a", "description": "x{y"}, {"name": "b"}]'
        assert decode_records(raw, GitHubRepo) == []

    @pytest.mark.parametrize("raw", [None, "", "  \n", "[]"])
    def test_blank_input_is_empty(self, raw):
        assert LooseJsonListDecoder(GitHubRepo).decode(raw) == []

    def test_decoder_is_reusable(self):
        decoder = LooseJsonListDecoder(GitHubRepo)
        assert len(decoder.decode(REPOS_JSON)) == 2
        assert len(decoder.decode(REPOS_JSON)) == 2


class TestHackathonRecords:

    def test_nested_links(self):
        raw = """[
            {"name": "HackX", "date": "Jan 2024", "description": "Won", "location": "Mumbai",
             "links": {"github": "https://github.com/x", "itch": "https://x.itch.io"}},
            {"name": "HackY", "date": "Mar 2024", "links": null},
            {"name": "HackZ"},
        ]"""

        events = decode_records(raw, HackathonEvent)

        assert [e.name for e in events] == ["HackX", "HackY", "HackZ"]
        assert events[0].links.github == "https://github.com/x"
        assert events[1].links == HackathonLinks()
        assert events[2].links == HackathonLinks()

    def test_links_must_be_object(self):
        raw = '[{"name": "bad", "links": "https://x"}, {"name": "ok"}]'
        assert [e.name for e in decode_records(raw, HackathonEvent)] == ["ok"]

    @pytest.mark.parametrize("links, expected", [
        (HackathonLinks(itch="i", site="s", devpost="d"), ("i", "Play Game")),
        (HackathonLinks(site="s", devpost="d"), ("s", "View Site")),
        (HackathonLinks(devpost="d"), ("d", "View Project")),
        (HackathonLinks(github="g"), (None, "View Project")),
    ])
    def test_project_link_priority(self, links, expected):
        assert links.project_link() == expected


class TestRecordDecoding:

    def test_integral_float_accepted(self):
        assert GitHubRepo.from_mapping({"name": "a", "forks_count": 2.0}).forks_count == 2

    @pytest.mark.parametrize("data, field_name", [
        ({"stargazers_count": 1.5}, "stargazers_count"),
        ({"stargazers_count": True}, "stargazers_count"),
        ({"fork": "yes"}, "fork"),
        ({"name": 7}, "name"),
    ])
    def test_type_mismatch(self, data, field_name):
        with pytest.raises(RecordDecodeError) as excinfo:
            GitHubRepo.from_mapping(data)
        assert excinfo.value.field_name == field_name
        assert excinfo.value.record_type == "GitHubRepo"

    def test_non_mapping_rejected(self):
        with pytest.raises(RecordDecodeError):
            GitHubRepo.from_mapping(["not", "a", "dict"])

    def test_to_dict(self):
        event = HackathonEvent(name="H", links=HackathonLinks(itch="i"))
        assert event.to_dict()["links"]["itch"] == "i"
