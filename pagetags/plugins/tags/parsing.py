"""Tag parsing and filtering for page metadata.

Everything in this module is a pure function of its inputs, except
TagAccumulator, which is an explicit value owned by whoever drives the
page-load step. None of these functions raise on malformed input: a
missing, non-string or empty tag field is simply an empty tag list.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

DEFAULT_DELIMITER = ","

TagList = List[str]
Page = Mapping[str, Any]


def parse_tags(raw: Any, delimiter: str = DEFAULT_DELIMITER) -> TagList:
    """Parse a delimited tag string into a list of stripped tags.

    Every segment produced by the split is kept, so consecutive or trailing
    delimiters yield empty tags: ``"a,,b"`` parses to ``["a", "", "b"]``.

    Args:
        raw: Raw header value. Anything that is not a non-empty string
            parses to an empty list.
        delimiter: Separator between tags.

    Returns:
        Tags in order of appearance, duplicates included.
    """
    if not isinstance(raw, str) or len(raw) == 0:
        return []
    return [tag.strip() for tag in raw.split(delimiter)]


def coerce_tags(value: Any, delimiter: str = DEFAULT_DELIMITER) -> TagList:
    """Return a tag list from either a raw string or an already parsed list."""
    if isinstance(value, (list, tuple)):
        return [tag for tag in value if isinstance(tag, str)]
    return parse_tags(value, delimiter)


def page_tags(page: Optional[Page], field: str = "tags",
              delimiter: str = DEFAULT_DELIMITER) -> TagList:
    """Read a tag field from a page record.

    Pages loaded by the host keep their headers under ``page["meta"]``;
    plain records carry the field at the top level. Both are accepted.
    """
    if not isinstance(page, Mapping):
        return []
    meta = page.get("meta")
    source = meta if isinstance(meta, Mapping) else page
    return coerce_tags(source.get(field), delimiter)


def filter_by_tags(
    pages: Sequence[Page],
    filter_tags: Union[Iterable[str], str, None],
    field: str = "tags",
    delimiter: str = DEFAULT_DELIMITER,
) -> Sequence[Page]:
    """Keep only the pages sharing at least one tag with ``filter_tags``.

    Matching is exact string equality. An empty or missing filter returns
    ``pages`` itself; otherwise a new list is returned and the input is
    left untouched. Relative order of surviving pages is preserved.
    """
    if isinstance(filter_tags, str):
        filter_tags = parse_tags(filter_tags, delimiter)
    wanted = set(filter_tags or ())
    if not wanted:
        return pages
    return [page for page in pages
            if not wanted.isdisjoint(page_tags(page, field, delimiter))]


def collect_all_tags(pages: Iterable[Page], field: str = "tags",
                     delimiter: str = DEFAULT_DELIMITER) -> TagList:
    """Union of the tags of every page, each distinct tag once, first-seen order."""
    accumulator = TagAccumulator(delimiter=delimiter)
    accumulator.add_pages(pages, field)
    return accumulator.snapshot()


class TagAccumulator:
    """Distinct tags seen across the pages of one load cycle.

    The owner calls reset() at the start of each cycle, feeds pages in with
    add_pages(), and hands snapshot() to whatever renders the cycle.
    """

    def __init__(self, delimiter: str = DEFAULT_DELIMITER):
        self.delimiter = delimiter
        # dict keeps insertion order, values unused
        self._seen: Dict[str, None] = {}

    def reset(self) -> None:
        self._seen.clear()

    def add(self, tags: Iterable[str]) -> None:
        for tag in tags:
            self._seen.setdefault(tag, None)

    def add_pages(self, pages: Iterable[Page], field: str = "tags") -> None:
        for page in pages:
            self.add(page_tags(page, field, self.delimiter))

    def snapshot(self) -> TagList:
        """Return a copy of the distinct tags collected so far."""
        return list(self._seen)

    def __len__(self) -> int:
        return len(self._seen)

    def __contains__(self, tag: object) -> bool:
        return tag in self._seen
