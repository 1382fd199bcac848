"""Comment, header and footer storage for configuration documents."""

from collections.abc import Iterable
from dataclasses import dataclass
from dataclasses import field

# Sequence items are addressed by their index
KeyPath = tuple[str | int, ...]
CommentLines = list[str | None]


def _normalize(lines: Iterable[str | None] | None) -> CommentLines:
    # None entries are blank lines; strings may span several lines
    result: CommentLines = []
    for line in lines or []:
        if line is None:
            result.append(None)
        else:
            result.extend(str(line).split("\n"))
    return result


@dataclass
class MetadataStore:
    """Formatting metadata of a document, independent of its values.

    Comments are keyed by path segments rather than path strings so they do
    not depend on the document's separator. Entries are kept when the value
    they annotate is deleted.

    In comment lists a None entry stands for a blank line and an empty
    string for an empty comment line. ``trailing`` holds the comments written
    after the last entry of a nested section, indented with that section.
    """

    comments: dict[KeyPath, CommentLines] = field(default_factory=dict)
    inline_comments: dict[KeyPath, CommentLines] = field(default_factory=dict)
    header: CommentLines = field(default_factory=list)
    footer: CommentLines = field(default_factory=list)
    trailing: dict[KeyPath, CommentLines] = field(default_factory=dict)

    def set_comments(self, path: KeyPath, lines: Iterable[str | None] | None) -> None:
        """Replace the comment block above a path (empty or None removes it)."""
        self._store(self.comments, path, lines)

    def get_comments(self, path: KeyPath) -> CommentLines:
        return list(self.comments.get(path, []))

    def set_inline_comments(self, path: KeyPath, lines: Iterable[str | None] | None) -> None:
        """Replace the comments written after a path's value."""
        self._store(self.inline_comments, path, [line for line in _normalize(lines) if line is not None])

    def get_inline_comments(self, path: KeyPath) -> CommentLines:
        return list(self.inline_comments.get(path, []))

    def set_header(self, lines: Iterable[str | None] | None) -> None:
        self.header = _normalize(lines)

    def set_footer(self, lines: Iterable[str | None] | None) -> None:
        self.footer = _normalize(lines)

    @staticmethod
    def _store(target: dict[KeyPath, CommentLines], path: KeyPath, lines: Iterable[str | None] | None) -> None:
        normalized = _normalize(lines)
        if normalized:
            target[path] = normalized
        else:
            target.pop(path, None)
