"""Unit tests for the matchendirect.fr page adapter."""
from __future__ import annotations

import pytest

from ingest.page_parser import HeaderNode, PageStructureParser, RowNode
from shared.errors import ParseError
from shared.models.enums import NodeKind

from conftest import ORIGIN, results_page


@pytest.fixture
def parser() -> PageStructureParser:
    return PageStructureParser(origin=ORIGIN)


def test_nodes_follow_document_order(parser: PageStructureParser) -> None:
    html = results_page(
        [
            ("Mardi 03 août 2021", [("21:00", "PSG", "2 - 1", "Lyon"), ("18:45", "Lille", "0 - 0", "Nice")]),
            ("Mercredi 04 août 2021", [("20:00", "Real Madrid", "3 - 2", "Chelsea")]),
        ],
        previous_href="/europe/ligue-des-champions-uefa/2022-14/",
    )

    page = parser.parse(html)

    assert [n.kind for n in page.nodes] == [
        NodeKind.HEADER, NodeKind.ROW, NodeKind.ROW, NodeKind.HEADER, NodeKind.ROW,
    ]
    assert page.nodes[0] == HeaderNode(text="Mardi 03 août 2021")
    assert page.nodes[1] == RowNode(home_team="PSG", away_team="Lyon", score_text="2 - 1", time_text="21:00")
    assert page.nodes[4] == RowNode(
        home_team="Real Madrid", away_team="Chelsea", score_text="3 - 2", time_text="20:00"
    )


def test_previous_url_is_origin_plus_relative_href(parser: PageStructureParser) -> None:
    html = results_page([("Mardi 03 août 2021", [])], previous_href="/europe/ligue-des-champions-uefa/2022-14/")
    page = parser.parse(html)
    assert page.previous_url == f"{ORIGIN}/europe/ligue-des-champions-uefa/2022-14/"


def test_absolute_previous_href_is_kept(parser: PageStructureParser) -> None:
    html = results_page([("Mardi 03 août 2021", [])], previous_href="https://mirror.example/p/2022-13/")
    assert parser.parse(html).previous_url == "https://mirror.example/p/2022-13/"


def test_missing_previous_anchor_gives_none(parser: PageStructureParser) -> None:
    html = results_page([("Mardi 03 août 2021", [("21:00", "PSG", "2 - 1", "Lyon")])])
    page = parser.parse(html)
    assert page.previous_url is None
    assert len(page.nodes) == 2


def test_missing_table_gives_no_nodes(parser: PageStructureParser) -> None:
    html = (
        '<html><body><a class="objselect_prevnext objselect_prec" href="/older/">&lt;</a>'
        '<div id="livescore"><div class="panel panel-info"><div class="panel-body">'
        "<p>Aucun match</p></div></div></div></body></html>"
    )
    page = parser.parse(html)
    assert page.nodes == ()
    assert page.is_empty
    assert page.previous_url == f"{ORIGIN}/older/"


def test_table_outside_livescore_panel_is_ignored(parser: PageStructureParser) -> None:
    html = (
        '<html><body><div id="other"><div class="panel panel-info"><div class="panel-body">'
        '<table class="table table-striped table-hover"><thead><tr><th>Mardi 03 août 2021</th></tr></thead>'
        "</table></div></div></div></body></html>"
    )
    assert parser.parse(html).is_empty


def test_header_without_th_has_no_text(parser: PageStructureParser) -> None:
    html = results_page([(None, [("21:00", "PSG", "2 - 1", "Lyon")])])
    page = parser.parse(html)
    assert page.nodes[0] == HeaderNode(text=None)


def test_row_with_missing_cells(parser: PageStructureParser) -> None:
    html = results_page([("Mardi 03 août 2021", [])]).replace(
        "</table>", '<tr><td class="lm1">21:00</td><td class="lm3"><span class="lm3_eq1">PSG</span></td></tr></table>'
    )
    row = parser.parse(html).nodes[-1]
    assert row == RowNode(home_team="PSG", away_team=None, score_text=None, time_text="21:00")


def test_other_elements_are_ignored(parser: PageStructureParser) -> None:
    html = results_page([("Mardi 03 août 2021", [("21:00", "PSG", "2 - 1", "Lyon")])]).replace(
        "</table>", "<caption>Résultats</caption><colgroup></colgroup></table>"
    )
    assert [n.kind for n in parser.parse(html).nodes] == [NodeKind.HEADER, NodeKind.ROW]


def test_parsing_is_repeatable(parser: PageStructureParser) -> None:
    html = results_page([("Mardi 03 août 2021", [("21:00", "PSG", "2 - 1", "Lyon")])])
    page = parser.parse(html)
    assert list(page.nodes) == list(page.nodes)
    assert parser.parse(html) == page


@pytest.mark.parametrize("raw", ["", "   \n  "])
def test_empty_document_is_a_parse_error(parser: PageStructureParser, raw: str) -> None:
    with pytest.raises(ParseError):
        parser.parse(raw)
