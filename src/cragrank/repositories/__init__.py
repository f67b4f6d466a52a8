"""File repository helpers."""

from cragrank.repositories.jsonl import (
    load_routes,
    load_ticks,
    read_json_lines,
    write_rating_records,
)

__all__ = ["load_routes", "load_ticks", "read_json_lines", "write_rating_records"]
