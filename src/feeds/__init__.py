"""Feed parsers, acquisition and strategy selection."""

from .delimited import parse_delimited_text
from .json_array import parse_json_array
from .registry import FeedStrategy, build_decoder, build_feed, build_parser
from .tabular import parse_tabular_rows

__all__ = [
    "FeedStrategy",
    "build_decoder",
    "build_feed",
    "build_parser",
    "parse_delimited_text",
    "parse_json_array",
    "parse_tabular_rows",
]
