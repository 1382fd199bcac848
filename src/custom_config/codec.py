"""YAML document codec.

Documents are read and written with ruamel.yaml in round-trip mode, which
keeps comments attached to the loaded tree. Parsing walks that tree in
document order and turns its comment slots into a MetadataStore:

- comment lines seen before an entry belong to that entry (map keys by
  name, sequence items by index)
- a comment on the line of an entry is its inline comment
- comments above the first key, up to the last blank line, form the header
- indented comments after the last entry of a nested section stay with it
- comments after the last value form the footer

Saving builds a fresh round-trip tree from plain data and hangs the stored
comments back onto it through the same comment API before dumping.
"""

import datetime
import io
import logging
import re
from collections.abc import Iterable
from collections.abc import Mapping
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap
from ruamel.yaml.comments import CommentedSeq
from ruamel.yaml.error import CommentMark
from ruamel.yaml.error import YAMLError
from ruamel.yaml.scalarbool import ScalarBoolean
from ruamel.yaml.scalarstring import FoldedScalarString
from ruamel.yaml.scalarstring import LiteralScalarString
from ruamel.yaml.tokens import CommentToken

from .exceptions import ConfigParseError
from .metadata import CommentLines
from .metadata import KeyPath
from .metadata import MetadataStore
from .models import DocumentOptions

logger = logging.getLogger(__name__)

_INLINE_SEPARATOR = re.compile(r"\s+#")
_BLOCK_SCALARS = (LiteralScalarString, FoldedScalarString)


def key_text(key: Any) -> str:
    """Return the section key used for a YAML mapping key."""
    if isinstance(key, (bool, ScalarBoolean)):
        return "true" if key else "false"
    if key is None:
        return "null"
    return str(key)


def _plain(value: Any) -> Any:
    """Strip round-trip types down to plain Python values."""
    if isinstance(value, Mapping):
        return {key_text(key): _plain(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_plain(item) for item in value]
    if isinstance(value, (bool, ScalarBoolean)):
        return bool(value)
    if isinstance(value, str):
        return str(value)
    if isinstance(value, int):
        return int(value)
    if isinstance(value, float):
        return float(value)
    if isinstance(value, datetime.datetime):
        return datetime.datetime.combine(value.date(), value.timetz())
    return value


def _comment_text(stripped: str) -> str:
    body = stripped[1:]
    if body.startswith(" "):
        body = body[1:]
    return body.rstrip()


def _format_comment(line: str | None) -> str:
    if line is None:
        return ""
    if not line:
        return "#"
    return f"# {line}"


def _strip_blank(lines: CommentLines) -> CommentLines:
    start, end = 0, len(lines)
    while start < end and lines[start] is None:
        start += 1
    while end > start and lines[end - 1] is None:
        end -= 1
    return lines[start:end]


def _comment_tokens(lines: CommentLines, column: int) -> list[CommentToken]:
    """Build full-line comment tokens the way ruamel stores loaded ones."""
    mark = CommentMark(column)
    return [CommentToken(_format_comment(line) + "\n", mark) for line in lines]


def _flatten(slot: Any) -> list[Any]:
    if slot is None:
        return []
    if isinstance(slot, list):
        return [token for item in slot for token in _flatten(item)]
    return [slot]


def _pieces(token: CommentToken) -> list[tuple[str, int]]:
    """Split a comment token into (stripped text, column) per source line."""
    value = token.value
    lines = value.split("\n")
    if value.endswith("\n"):
        lines.pop()
    column = getattr(token.start_mark, "column", 0)
    pieces = []
    for number, line in enumerate(lines):
        offset = column if number == 0 else 0
        pieces.append((line.strip(), offset + len(line) - len(line.lstrip())))
    return pieces


class _CommentCollector:
    """Walks a round-trip tree and files its comments into a MetadataStore."""

    def __init__(self, metadata: MetadataStore):
        self.metadata = metadata
        self.pending: list[tuple[str | None, int]] = []
        self.last: KeyPath | None = None
        self.seen: set[int] = set()

    def walk(self, node: CommentedMap | CommentedSeq, path: KeyPath) -> None:
        own = node.ca.comment or [None, None]
        self.post(own[0])
        self.lines(own[1])
        if isinstance(node, CommentedMap):
            for key, value in node.items():
                slots = node.ca.items.get(key) or [None, None, None, None]
                child = path + (key_text(key),)
                self.lines(slots[1])
                self.anchor(child)
                self.post(slots[0])
                self.value(value, child, slots[2], slots[3] if len(slots) > 3 else None)
        else:
            for index, value in enumerate(node):
                slots = node.ca.items.get(index) or [None, None]
                child = path + (index,)
                self.lines(slots[1])
                self.anchor(child)
                self.value(value, child, slots[0], None)
        self.lines(node.ca.end)
        if path and isinstance(node, CommentedMap) and node.lc.col is not None:
            self.close(path, node.lc.col)

    def value(self, value: Any, path: KeyPath, post: Any, pre: Any) -> None:
        if isinstance(value, (CommentedMap, CommentedSeq)):
            self.walk(value, path)
            self.post(post)
            self.lines(pre)
        else:
            self.lines(pre)
            self.post(post, block=isinstance(value, _BLOCK_SCALARS))

    def post(self, slot: Any, block: bool = False) -> None:
        """Read a comment that starts on the line of the current entry.

        Its first line is the entry's inline comment; block scalars end
        before the comment, so all of theirs are full lines.
        """
        for index, token in enumerate(self.fresh(slot)):
            pieces = _pieces(token)
            if index == 0 and not block and pieces:
                text, _ = pieces.pop(0)
                self.eol(text)
            self.pending.extend(self.line(piece) for piece in pieces)

    def lines(self, slot: Any) -> None:
        for token in self.fresh(slot):
            if isinstance(token, str):
                # Comment after a block scalar indicator
                self.eol(token)
                continue
            self.pending.extend(self.line(piece) for piece in _pieces(token))

    def fresh(self, slot: Any) -> list[Any]:
        tokens = []
        for token in _flatten(slot):
            if id(token) not in self.seen:
                self.seen.add(id(token))
                tokens.append(token)
        return tokens

    def line(self, piece: tuple[str, int]) -> tuple[str | None, int]:
        text, column = piece
        if text.startswith("#"):
            return _comment_text(text), column
        # Blank line (document markers read as blank too)
        return None, column

    def eol(self, text: str) -> None:
        text = text.strip()
        if not text.startswith("#") or self.last is None:
            return
        inline = [part.strip() for part in _INLINE_SEPARATOR.split(text[1:])]
        self.metadata.inline_comments.setdefault(self.last, []).extend(inline)

    def anchor(self, path: KeyPath) -> None:
        block = [text for text, _ in self.pending]
        self.pending = []
        if self.last is None:
            if None in block:
                split = len(block) - 1 - block[::-1].index(None)
                self.metadata.set_header(_strip_blank(block[:split]))
                block = block[split + 1 :]
            block = _strip_blank(block)
        if block:
            self.metadata.comments[path] = block
        self.last = path

    def close(self, path: KeyPath, column: int) -> None:
        """Keep comments indented at a section's level at the end of that section."""
        end = 0
        for index, (text, indent) in enumerate(self.pending):
            if text is None:
                continue
            if indent < column:
                break
            end = index + 1
        if end:
            self.metadata.trailing[path] = [text for text, _ in self.pending[:end]]
            del self.pending[:end]

    def finish(self) -> None:
        remaining = _strip_blank([text for text, _ in self.pending])
        self.pending = []
        if self.last is None:
            self.metadata.set_header(remaining)
        else:
            self.metadata.set_footer(remaining)


class YamlDocumentCodec:
    """Parses and emits YAML documents together with their comments."""

    def parse(self, text: str, parse_comments: bool = True) -> tuple[dict[str, Any], MetadataStore]:
        """Parse YAML text into plain data and metadata.

        Args:
            text: YAML source
            parse_comments: Whether to collect comments, header and footer

        Returns:
            Tuple of (mapping with string keys, metadata)

        Raises:
            ConfigParseError: If the text is not valid YAML or its top level
                is not a mapping
        """
        metadata = MetadataStore()
        try:
            tree = self._yaml().load(text)
        except YAMLError as e:
            raise ConfigParseError(f"Invalid YAML document: {e}") from e

        if tree is None:
            # Nothing but comments and blank lines
            if parse_comments:
                metadata.set_header(_strip_blank([self._source_line(line) for line in text.splitlines()]))
            return {}, metadata
        if not isinstance(tree, CommentedMap):
            raise ConfigParseError(
                f"Top level of a configuration document must be a mapping, not {type(tree).__name__}"
            )

        if parse_comments:
            collector = _CommentCollector(metadata)
            collector.walk(tree, ())
            collector.finish()
        return _plain(tree), metadata

    def serialize(self, data: Mapping[str, Any], metadata: MetadataStore, options: DocumentOptions) -> str:
        """Emit plain data and metadata as YAML text.

        Args:
            data: Mapping of plain values (rich values already encoded)
            metadata: Comments, header and footer
            options: Indent, width and comment options

        Returns:
            YAML text ending with a newline, or an empty string for an empty
            document without header or footer
        """
        if not data:
            lines = [_format_comment(line) for line in metadata.header + metadata.footer]
            return "\n".join(lines) + "\n" if lines else ""

        root = self._build(data, (), 0, metadata, options)
        if metadata.header:
            header = [_format_comment(line) for line in metadata.header + [None]]
            root.yaml_set_start_comment("\n".join(header) + "\n")
        if metadata.footer:
            self._set_end_comments(root, _comment_tokens(metadata.footer, 0))

        stream = io.StringIO()
        self._yaml(options).dump(root, stream)
        return stream.getvalue()

    # ===== Private Helpers =====

    def _yaml(self, options: DocumentOptions | None = None) -> YAML:
        yaml_rt = YAML(typ="rt")
        yaml_rt.default_flow_style = False
        if options is not None:
            # Dashes sit two columns left of the item content
            yaml_rt.indent(mapping=options.indent, sequence=options.indent, offset=options.indent - 2)
            yaml_rt.width = options.width
        return yaml_rt

    def _source_line(self, line: str) -> str | None:
        stripped = line.strip()
        return _comment_text(stripped) if stripped.startswith("#") else None

    def _build(
        self, value: Any, path: KeyPath, column: int, metadata: MetadataStore, options: DocumentOptions
    ) -> Any:
        """Convert plain data into a round-trip tree carrying the stored comments.

        Args:
            value: Plain value
            path: Key path of value
            column: Column of the entries of value when it is a collection
            metadata: Comments to attach
            options: Indent and comment options

        Returns:
            A CommentedMap, a CommentedSeq, or value itself for scalars
        """
        if isinstance(value, Mapping):
            node: CommentedMap | CommentedSeq = CommentedMap()
            entries: Iterable[tuple[Any, Any]] = value.items()
        elif isinstance(value, list):
            node = CommentedSeq()
            entries = enumerate(value)
        else:
            return value

        for key, item in entries:
            if isinstance(node, CommentedMap):
                inner = column + options.indent - (2 if isinstance(item, list) else 0)
                node[key] = self._build(item, path + (key,), inner, metadata, options)
            else:
                node.append(self._build(item, path + (key,), column + 2, metadata, options))
            if options.parse_comments:
                self._attach(node, key, path + (key,), column, metadata)

        trailing = metadata.trailing.get(path)
        if options.parse_comments and path and trailing and isinstance(node, CommentedMap):
            self._set_end_comments(node, _comment_tokens(trailing, column))
        return node

    def _attach(
        self, node: CommentedMap | CommentedSeq, key: Any, path: KeyPath, column: int, metadata: MetadataStore
    ) -> None:
        inline = metadata.inline_comments.get(path)
        if inline:
            node.yaml_add_eol_comment(" ".join(_format_comment(line) for line in inline), key, column=0)
        comments = metadata.comments.get(path)
        if comments:
            # Slot 1 holds the lines written before a key or sequence item
            node.ca.items.setdefault(key, [None, None, None, None])[1] = _comment_tokens(comments, column)

    def _set_end_comments(self, node: CommentedMap, tokens: list[CommentToken]) -> None:
        if node.ca.comment is None:
            # End comments are only emitted for collections with a comment slot
            node.ca.comment = [None, None]
        node.yaml_end_comment_extend(tokens, clear=True)
        logger.debug(f"Attached {len(tokens)} end comment lines")
