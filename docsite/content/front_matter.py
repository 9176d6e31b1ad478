r"""Split content documents into front-matter and Markdown body.

A document may open with a block delimited by ``---`` lines holding YAML
metadata. The keys docsite consumes are ``title``, ``order`` (an integer
position among siblings), and ``template``; everything else passes through
to the templates untouched.

Example
-------
>>> doc = parse_document("---\ntitle: Examples\norder: 2\n---\nBody\n")
>>> doc.front_matter["title"], doc.front_matter["order"], doc.body
('Examples', 2, 'Body\n')
"""

from __future__ import annotations

import dataclasses as dc
import io
import typing as typ
from pathlib import Path

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from docsite._constants import FRONT_MATTER_DELIMITER
from docsite.errors import ContentParseError


@dc.dataclass(frozen=True, slots=True)
class Document:
    """Parsed content document.

    Attributes
    ----------
    front_matter : dict[str, Any]
        Metadata from the leading YAML block; empty when there is none.
    body : str
        Markdown that follows the block.
    """

    front_matter: dict[str, typ.Any]
    body: str


def parse_document(text: str, *, source: Path | str = "<string>") -> Document:
    """Return the front-matter and body of ``text``.

    Parameters
    ----------
    text : str
        Full document text.
    source : Path or str, optional
        Location reported in errors.

    Returns
    -------
    Document
        Parsed metadata and Markdown body.

    Raises
    ------
    ContentParseError
        If the block is unterminated, is not valid YAML, is not a mapping, or
        carries a non-integer ``order``.
    """
    clean = text.lstrip("\ufeff")
    lines = clean.splitlines(keepends=True)
    if not lines or lines[0].strip() != FRONT_MATTER_DELIMITER:
        return Document(front_matter={}, body=clean)

    end = None
    for idx in range(1, len(lines)):
        if lines[idx].strip() == FRONT_MATTER_DELIMITER:
            end = idx
            break
    if end is None:
        msg = "front-matter block is not terminated"
        raise ContentParseError(source, msg)

    front_matter = _load_block("".join(lines[1:end]), source)
    _validate(front_matter, source)
    return Document(front_matter=front_matter, body="".join(lines[end + 1 :]))


def read_document(path: Path) -> Document:
    """Read and parse the UTF-8 document at ``path``."""
    try:
        text = path.read_bytes().decode("utf-8")
    except UnicodeDecodeError as exc:
        msg = f"not valid UTF-8: {exc}"
        raise ContentParseError(path, msg) from exc
    except OSError as exc:
        msg = f"unreadable: {exc}"
        raise ContentParseError(path, msg) from exc
    return parse_document(text, source=path)


def _load_block(block: str, source: Path | str) -> dict[str, typ.Any]:
    loader = YAML(typ="safe")
    loader.version = (1, 2)
    try:
        loaded = loader.load(io.StringIO(block))
    except YAMLError as exc:
        msg = f"invalid front-matter: {exc}"
        raise ContentParseError(source, msg) from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        msg = "front-matter must be a mapping"
        raise ContentParseError(source, msg)
    return {str(key): value for key, value in loaded.items()}


def _validate(front_matter: dict[str, typ.Any], source: Path | str) -> None:
    order = front_matter.get("order")
    if order is not None and (isinstance(order, bool) or not isinstance(order, int)):
        msg = f"'order' must be an integer, got {order!r}"
        raise ContentParseError(source, msg)
    title = front_matter.get("title")
    if title is not None:
        front_matter["title"] = str(title).strip()


__all__ = ["Document", "parse_document", "read_document"]
