from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from news_sources import Source, load_sources, parse_source_line
from news_taxonomy import Taxonomy, TaxonomyError, load_taxonomy, phrase_pattern

from conftest import ROOT


def _write(path: Path, content: str) -> Path:
    path.write_text(textwrap.dedent(content).strip() + "\n", encoding="utf-8")
    return path


def test_shipped_config_loads():
    tax = load_taxonomy(str(ROOT / "config" / "taxonomy.json5"))
    sources = load_sources(str(ROOT / "config" / "sources.txt"), limit=0)

    assert "Bolton" in list(tax.place_names())
    assert tax.domain_to_place["theboltonnews.co.uk"] == "Bolton"
    assert "council" in tax.stop_words
    assert len(sources) > 40
    wigan = next(s for s in sources if s.name == "Wigan Today")
    assert wigan.candidates[0] == "https://www.wigantoday.net/rss"
    assert len(wigan.candidates) == 3


def test_sources_file_skips_comments_blank_and_bad_lines(tmp_path):
    path = _write(tmp_path / "sources.txt", """
        # ===== National =====
        BBC Politics | https://feeds.bbci.co.uk/news/politics/rss.xml

        No Urls Here |
        Sky | http://a.example/rss | https://b.example/rss | http://a.example/rss
    """)

    sources = load_sources(str(path), limit=0)

    assert sources == [
        Source("BBC Politics", ("https://feeds.bbci.co.uk/news/politics/rss.xml",)),
        Source("Sky", ("http://a.example/rss", "https://b.example/rss")),
    ]


def test_source_limit(tmp_path):
    path = _write(tmp_path / "sources.txt", """
        A | https://a.example/rss
        B | https://b.example/rss
    """)
    assert [s.name for s in load_sources(str(path), limit=1)] == ["A"]


def test_parse_source_line_requires_a_url():
    assert parse_source_line("Just a name") is None


def test_duplicate_map_keys_last_write_wins(tmp_path):
    path = _write(tmp_path / "taxonomy.json5", """
        {
          places: ["Bolton"],
          domain_to_place: {
            "example.co.uk": "Bolton",
            "example.co.uk": "Wigan",
          },
          source_to_place: {
            "Local News": "Leeds",
            "Local News": "York",  // trailing comma and comments are fine
          },
        }
    """)

    tax = load_taxonomy(str(path))

    assert tax.domain_to_place["example.co.uk"] == "Wigan"
    assert tax.source_to_place["local news"] == "York"


def test_missing_taxonomy_file(tmp_path):
    with pytest.raises(TaxonomyError):
        load_taxonomy(str(tmp_path / "nope.json5"))


def test_malformed_taxonomy(tmp_path):
    path = _write(tmp_path / "taxonomy.json5", "{ include: [ ")
    with pytest.raises(TaxonomyError):
        load_taxonomy(str(path))


def test_wrong_shapes_are_rejected():
    with pytest.raises(TaxonomyError):
        Taxonomy.from_mapping({"include": "council"})
    with pytest.raises(TaxonomyError):
        Taxonomy.from_mapping({"domain_to_place": {"a.com": ["Bolton"]}})


def test_phrase_pattern_is_whole_word_and_flexible_on_spaces():
    rx = phrase_pattern("council tax")
    assert rx.search("New COUNCIL   tax band")
    assert not rx.search("councils taxes")
    assert phrase_pattern("by-election").search("the by-election result")
    assert phrase_pattern("britain's got talent").search("Britain's Got Talent final")
