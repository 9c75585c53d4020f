from lorelens.parsers.catalog import decode_card, decode_catalog
from lorelens.parsers.corpus import decode_corpus, decode_deck
from lorelens.parsers.decklist import parse_decklist, parse_decklist_report
from lorelens.parsers.normalize import normalize_name, tokenize
from lorelens.parsers.placement import is_top_cut, parse_finish

__all__ = [
    "decode_card",
    "decode_catalog",
    "decode_corpus",
    "decode_deck",
    "is_top_cut",
    "normalize_name",
    "parse_decklist",
    "parse_decklist_report",
    "parse_finish",
    "tokenize",
]
