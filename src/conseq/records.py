"""Record blocks: members written as key/value lines, and root sequences of records.

Layouts (``ConseqFormat``):

- ``NONE``: one ``key = value`` per line.
- ``COMPACT``: all members on one line as ``key:value`` separated by spaces.
- ``READABLE``: one ``key = value`` per line, comma-terminated except the last,
  with ``# comment`` lines and a ``[Display Name]`` header where declared.

Reading accepts all three layouts without being told which one produced the
text. Comments and headers are never read back.
"""

from __future__ import annotations

import functools
import logging
from typing import TYPE_CHECKING, Any, Iterable, Iterator

from conseq.errors import ConseqError, MalformedValue, MissingTarget, UnrepresentableValue, UnsupportedRoot
from conseq.logging_config import TRACE_LEVEL
from conseq.parsing import ConseqLexer
from conseq.registry import ShapeRegistry, default_registry
from conseq.types import ConseqFormat, MemberDefinition, RecordShape, SequenceKind
from conseq.values import BLOCK_CLOSE, BLOCK_OPEN, parse_value, render_value

if TYPE_CHECKING:
    import ply.lex as lex

logger = logging.getLogger(__name__)

_KEY_SEPARATORS = {
    ConseqFormat.NONE: " = ",
    ConseqFormat.COMPACT: ":",
    ConseqFormat.READABLE: " = ",
}

_MEMBER_SEPARATORS = {
    ConseqFormat.NONE: "\n",
    ConseqFormat.COMPACT: " ",
    ConseqFormat.READABLE: ",\n",
}

ROOT_SEPARATOR = "\n\n"


@functools.lru_cache(maxsize=None)
def _get_lexer() -> ConseqLexer:
    lexer = ConseqLexer()
    lexer.build()
    return lexer


def serialize_record(
    record: Any,
    fmt: ConseqFormat = ConseqFormat.NONE,
    *,
    shape: RecordShape | None = None,
    registry: ShapeRegistry | None = None,
    nested: bool = False,
) -> str:
    """Write one record as a member block.

    Args:
        record: The record to write.
        fmt: Layout of the block.
        shape: Shape of the record; looked up from ``type(record)`` when omitted.
        registry: Registry used for the lookup (default registry when omitted).
        nested: Leave out the record comment and header (blocks inside blocks).

    Raises:
        UnsupportedRoot: If no shape is given and ``record`` is not a record.
        UnrepresentableValue: If a key or value would not read back as written.
    """
    if shape is None:
        shape = (registry or default_registry).find_record_shape(type(record))
        if shape is None:
            raise UnsupportedRoot(record)

    key_separator = _KEY_SEPARATORS[fmt]
    entries = []
    for member in shape.members:
        try:
            text = render_value(member.getter(record), member.shape, fmt)
            _check_representable(member, text, fmt)
        except ConseqError as e:
            raise e.at(member.key)
        logger.log(TRACE_LEVEL, "Wrote %s.%s as %r", shape.name, member.name, text)
        entry = f"{member.key}{key_separator}{text}"
        if fmt is ConseqFormat.READABLE and member.comment:
            entry = f"{_comment_lines(member.comment)}\n{entry}"
        entries.append(entry)

    body = _MEMBER_SEPARATORS[fmt].join(entries)
    if fmt is not ConseqFormat.READABLE or nested:
        return body

    head = []
    if shape.comment:
        head.append(_comment_lines(shape.comment))
    if shape.display_name:
        head.append(f"[{shape.display_name}]")
    return "\n".join(head + [body]) if body else "\n".join(head)


def serialize_root_sequence(
    records: Iterable[Any],
    fmt: ConseqFormat = ConseqFormat.NONE,
    *,
    registry: ShapeRegistry | None = None,
) -> str:
    """Write records as blocks separated by a blank line.

    Raises:
        UnsupportedRoot: If an element is not a record.
        UnrepresentableValue: If an element writes no key/value or header line,
            since the reader skips such blocks.
    """
    registry = registry or default_registry
    blocks = []
    for record in records:
        shape = registry.find_record_shape(type(record))
        if shape is None:
            raise UnsupportedRoot(record)
        block = serialize_record(record, fmt, shape=shape)
        if not _has_entries(block):
            raise UnrepresentableValue(
                block, f"a {shape.name} record without members cannot be an element of a root sequence"
            )
        blocks.append(block)
    return ROOT_SEPARATOR.join(blocks)


def deserialize_record(
    text: str,
    target: RecordShape | type,
    *,
    registry: ShapeRegistry | None = None,
) -> Any:
    """Read one record from a member block.

    Unknown keys are ignored; members missing from the text keep their
    default value.

    Raises:
        MissingTarget: If ``target`` is not a record shape or record type.
        MalformedValue: If a value cannot be parsed into its member's shape.
        UnknownSymbol: If an enum value names no member.
    """
    shape = resolve_record_target(target, registry)
    return _read_block(_get_lexer().tokenize(text), shape)


def deserialize_root_sequence(
    text: str,
    element: RecordShape | type,
    kind: SequenceKind = SequenceKind.LIST,
    *,
    registry: ShapeRegistry | None = None,
) -> Any:
    """Read blank-line separated records into a tuple, list or set.

    Blocks holding nothing but comments are skipped.
    """
    shape = resolve_record_target(element, registry)
    blocks: list[list[lex.LexToken]] = [[]]
    for tok in _get_lexer().tokenize(text):
        if tok.type == "BLANK":
            blocks.append([])
        else:
            blocks[-1].append(tok)

    records = [
        _read_block(block, shape)
        for block in blocks
        if any(tok.type != "COMMENT" for tok in block)
    ]
    logger.debug("Read %d %s records", len(records), shape.name)
    return kind.container(records)


def resolve_record_target(target: RecordShape | type, registry: ShapeRegistry | None = None) -> RecordShape:
    """Return the record shape for a deserialization target.

    Raises:
        MissingTarget: If ``target`` is not a record shape or record type.
    """
    if isinstance(target, RecordShape):
        return target
    if isinstance(target, type):
        shape = (registry or default_registry).find_record_shape(target)
        if shape is not None:
            return shape
    raise MissingTarget(target)


def _read_block(tokens: list[lex.LexToken], shape: RecordShape) -> Any:
    lines = [tok for tok in tokens if tok.type in ("ENTRY", "HEADER")]
    if lines and lines[0].type == "HEADER":
        lines = lines[1:]

    entries = []
    for tok in lines:
        if tok.type == "HEADER":
            logger.debug("Ignoring header [%s] at line %d", tok.value, tok.lineno)
            continue
        entries.append(tok.value)

    assigned: list[tuple[MemberDefinition, Any]] = []
    for key, raw in _iter_pairs(list(_iter_fragments(entries)), shape):
        member = shape.find_member(key)
        if member is None:
            logger.debug("Ignoring unknown key %r for %s", key, shape.name)
            continue
        if member.readonly:
            logger.debug("Skipping read-only member %s.%s", shape.name, member.name)
            continue
        try:
            value = parse_value(raw, member.shape)
        except ConseqError as e:
            raise e.at(member.key)
        logger.log(TRACE_LEVEL, "Read %s.%s = %r", shape.name, member.name, value)
        assigned.append((member, value))

    return shape.build(assigned)


def _iter_fragments(lines: list[str]) -> Iterator[str]:
    """Split compact lines (no '=', some whitespace) into their key:value fragments."""
    for line in lines:
        if "=" not in line and any(c.isspace() for c in line):
            yield from line.split()
        else:
            yield line


def _split_pair(fragment: str) -> tuple[str, str] | None:
    index = fragment.find("=")
    if index < 0:
        index = fragment.find(":")
    if index <= 0:
        return None
    return fragment[:index].strip(), _read_value_text(fragment[index + 1 :])


def _read_value_text(raw: str) -> str:
    """Trim a raw value the way the reader does: outer whitespace and one trailing comma."""
    value = raw.strip()
    if value.endswith(","):
        value = value[:-1].rstrip()
    return value


def _is_block_close(fragment: str) -> bool:
    return fragment.removesuffix(",").strip() == BLOCK_CLOSE


def _iter_pairs(fragments: list[str], shape: RecordShape) -> Iterator[tuple[str, str]]:
    """Pair keys with raw values, gathering '{ ... }' blocks into one value."""
    index = 0
    while index < len(fragments):
        fragment = fragments[index]
        index += 1
        pair = _split_pair(fragment)
        if pair is None:
            logger.debug("Ignoring %r: no key separator", fragment)
            continue
        key, value = pair
        if value == BLOCK_OPEN:
            inner, index = _collect_block(fragments, index, key, shape)
            value = "\n".join([BLOCK_OPEN, *inner, BLOCK_CLOSE])
        yield key, value


def _collect_block(fragments: list[str], start: int, key: str, shape: RecordShape) -> tuple[list[str], int]:
    depth = 1
    inner = []
    for index in range(start, len(fragments)):
        fragment = fragments[index]
        if _is_block_close(fragment):
            depth -= 1
            if depth == 0:
                return inner, index + 1
        else:
            pair = _split_pair(fragment)
            if pair is not None and pair[1] == BLOCK_OPEN:
                depth += 1
        inner.append(fragment)
    raise MalformedValue(shape, BLOCK_OPEN, f"block opened by '{key}' is never closed").at(key)


def _check_representable(member: MemberDefinition, text: str, fmt: ConseqFormat) -> None:
    if fmt is ConseqFormat.COMPACT and _has_whitespace(member.key):
        raise UnrepresentableValue(member.key, "compact layout does not allow whitespace in keys")
    if member.shape.is_block:
        return
    if "\n" in text or "\r" in text:
        raise UnrepresentableValue(text, "values must fit on one line")
    if _read_value_text(text) == BLOCK_OPEN:
        raise UnrepresentableValue(text, "a lone '{' opens a nested block")
    if fmt is ConseqFormat.COMPACT and (_has_whitespace(text) or "=" in text):
        raise UnrepresentableValue(text, "compact layout does not allow whitespace or '=' in values")


def _has_entries(block: str) -> bool:
    """Return whether a block holds a line other than a comment."""
    return any(tok.type != "COMMENT" for tok in _get_lexer().tokenize(block))


def _has_whitespace(text: str) -> bool:
    return any(c.isspace() for c in text)


def _comment_lines(comment: str) -> str:
    return "\n".join(f"# {line}".rstrip() for line in comment.splitlines())
