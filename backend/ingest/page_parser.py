"""
Results-page adapter for matchendirect.fr.

Everything that knows about the site's markup lives here. The rest of the
pipeline only sees ParsedPage, HeaderNode and RowNode, so a markup change is
fixed in this module alone.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional, Union

from bs4 import BeautifulSoup, Tag

from shared.errors import ParseError
from shared.models.enums import NodeKind

DEFAULT_ORIGIN = "https://www.matchendirect.fr"

RESULTS_TABLE_SELECTOR = (
    "div#livescore .panel.panel-info .panel-body table.table.table-striped.table-hover"
)
PREVIOUS_LINK_SELECTOR = "a.objselect_prevnext.objselect_prec"
HEADER_TEXT_SELECTOR = "tr th"
HOME_TEAM_SELECTOR = ".lm3 .lm3_eq1"
AWAY_TEAM_SELECTOR = ".lm3 .lm3_eq2"
SCORE_SELECTOR = ".lm3 .lm3_score"
TIME_SELECTOR = ".lm1"


@dataclass(frozen=True)
class HeaderNode:
    """Date banner; applies to every following row until the next header."""
    text: Optional[str]
    kind: NodeKind = NodeKind.HEADER


@dataclass(frozen=True)
class RowNode:
    """One match line, cells as raw text."""
    home_team: Optional[str]
    away_team: Optional[str]
    score_text: Optional[str]
    time_text: Optional[str]
    kind: NodeKind = NodeKind.ROW


PageNode = Union[HeaderNode, RowNode]


@dataclass(frozen=True)
class ParsedPage:
    nodes: tuple[PageNode, ...]
    previous_url: Optional[str]

    @property
    def is_empty(self) -> bool:
        return not self.nodes


def _cell_text(node: Tag, selector: str) -> Optional[str]:
    cell = node.select_one(selector)
    if cell is None:
        return None
    return cell.get_text(strip=True) or None


def _iter_nodes(table: Tag) -> Iterator[PageNode]:
    for child in table.children:
        if not isinstance(child, Tag):
            continue
        if child.name == "thead":
            yield HeaderNode(text=_cell_text(child, HEADER_TEXT_SELECTOR))
        elif child.name == "tr":
            yield RowNode(
                home_team=_cell_text(child, HOME_TEAM_SELECTOR),
                away_team=_cell_text(child, AWAY_TEAM_SELECTOR),
                score_text=_cell_text(child, SCORE_SELECTOR),
                time_text=_cell_text(child, TIME_SELECTOR),
            )


class PageStructureParser:
    """Turns one results page into ordered header/row nodes and the 'previous' link."""

    def __init__(self, origin: str = DEFAULT_ORIGIN) -> None:
        self._origin = origin.rstrip("/")

    def parse(self, raw_html: str) -> ParsedPage:
        """
        Parse a fetched document.

        A page without the results table yields no nodes; that is the normal
        end of the crawl chain, not an error.

        Raises:
            ParseError: If the document is empty.
        """
        if not raw_html or not raw_html.strip():
            raise ParseError("empty document")

        soup = BeautifulSoup(raw_html, "html.parser")
        table = soup.select_one(RESULTS_TABLE_SELECTOR)
        nodes = tuple(_iter_nodes(table)) if table is not None else ()
        return ParsedPage(nodes=nodes, previous_url=self.previous_page_url(soup))

    def previous_page_url(self, soup: BeautifulSoup) -> Optional[str]:
        anchor = soup.select_one(PREVIOUS_LINK_SELECTOR)
        if anchor is None:
            return None
        href = anchor.get("href")
        if not isinstance(href, str) or not href.strip():
            return None
        href = href.strip()
        if href.startswith(("http://", "https://")):
            return href
        return self._origin + href
