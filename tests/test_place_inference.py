from __future__ import annotations

from place_inference import (
    host_of,
    infer_places,
    ordered_places,
    places_from_domain,
    places_from_source,
    places_in_source_name,
    places_in_text,
)


def item(title="", summary="", link="", source=""):
    return {"title": title, "summary": summary, "link": link, "source": source, "pubDate": None}


def test_text_match_finds_every_place(taxonomy):
    it = item("Bolton and Wigan councils clash over tram budget")
    assert places_in_text(it, taxonomy) == {"Bolton", "Wigan"}


def test_text_match_is_whole_word_and_case_insensitive(taxonomy):
    assert places_in_text(item("HAMMERSMITH bridge closure"), taxonomy) == set()
    assert places_in_text(item("Row in hamm over rates"), taxonomy) == {"Hamm"}
    assert places_in_text(item("", "st helens   housing vote"), taxonomy) == {"St Helens"}


def test_host_of_strips_www_and_port():
    assert host_of("https://www.TheBoltonNews.co.uk:443/news/1") == "theboltonnews.co.uk"
    assert host_of("") == ""


def test_domain_lookup_falls_back_to_parent_domain(taxonomy):
    assert places_from_domain(item(link="https://www.theboltonnews.co.uk/news/1"), taxonomy) == {"Bolton"}
    assert places_from_domain(item(link="https://feeds.standard.co.uk/rss/1"), taxonomy) == {"London"}
    assert places_from_domain(item(link="https://example.com/x"), taxonomy) == set()
    assert places_from_domain(item(link=""), taxonomy) == set()


def test_source_lookup_ignores_case(taxonomy):
    assert places_from_source(item(source="evening standard"), taxonomy) == {"London"}
    assert places_from_source(item(source="BBC Politics"), taxonomy) == set()


def test_place_in_source_name(taxonomy):
    assert places_in_source_name(item(source="Manchester Evening News"), taxonomy) == {"Manchester"}


def test_heuristics_are_unioned(taxonomy):
    it = item(
        title="Wigan mayor race heats up",
        link="https://www.theboltonnews.co.uk/news/2",
        source="Evening Standard",
    )
    assert infer_places(it, taxonomy) == {"Wigan", "Bolton", "London"}


def test_no_match_gives_empty_set(taxonomy):
    assert infer_places(item("Budget", "Chancellor speaks", "https://bbc.co.uk/x", "BBC"), taxonomy) == set()


def test_ordered_places_follows_config_order(taxonomy):
    assert ordered_places({"London", "Zetland", "Bolton", "Abbey"}, taxonomy) == ["Bolton", "London", "Abbey", "Zetland"]
