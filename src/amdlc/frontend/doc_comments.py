"""
Doc Comment Parser

Parses ``/** ... */`` documentation comments with a Lark LALR grammar and
answers the one question exposure needs: which subjects are marked private.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from lark import Lark, Transformer
from lark.exceptions import LarkError

from ..utils.config import DEFAULT_PARSER_CACHE_FILE

logger = logging.getLogger("amdlc.frontend.doc_comments")

_DOC_COMMENT_RE = re.compile(r"/\*\*([\s\S]*?)\*/")
_GUTTER_RE = re.compile(r"^[ \t]*\*(?!/)[ \t]?", re.MULTILINE)

SUBJECT_TAGS = ("class", "name")


@dataclass
class DocTag:
    name: str
    value: str = ""


@dataclass
class DocBlock:
    """Tags and free text of one documentation comment."""
    tags: List[DocTag] = field(default_factory=list)
    text: List[str] = field(default_factory=list)

    def tag_values(self, name: str) -> List[str]:
        return [tag.value for tag in self.tags if tag.name == name]

    def has_tag(self, name: str) -> bool:
        return any(tag.name == name for tag in self.tags)

    @property
    def subject(self) -> Optional[str]:
        """First word of the first @class or @name tag."""
        for tag_name in SUBJECT_TAGS:
            for value in self.tag_values(tag_name):
                if value:
                    return value.split()[0]
        return None

    @property
    def is_private(self) -> bool:
        if self.has_tag("private"):
            return True
        return any(value.split()[:1] == ["private"] for value in self.tag_values("access"))


class DocCommentTransformer(Transformer):
    """Converts the Lark parse tree of a comment body into a DocBlock."""

    def start(self, items):
        block = DocBlock()
        for item in items:
            if isinstance(item, DocTag):
                block.tags.append(item)
            else:
                block.text.append(item)
        return block

    def tag(self, items):
        name = str(items[0])[1:]
        value = str(items[1]).strip() if len(items) > 1 else ""
        return DocTag(name, value)

    def text(self, items):
        return str(items[0]).strip()


class DocCommentParser:
    """
    Parser for documentation comment bodies.

    Uses Lark native caching; one instance can be shared across builds.
    """

    def __init__(self, cache_file: Optional[str] = DEFAULT_PARSER_CACHE_FILE):
        grammar_path = Path(__file__).parent / "doc_comment.lark"
        self.parser = Lark.open(
            str(grammar_path),
            start="start",
            parser="lalr",
            cache=cache_file if cache_file else False,
        )
        self.transformer = DocCommentTransformer()

    def parse_body(self, body: str) -> DocBlock:
        """Parse the text between ``/**`` and ``*/``."""
        text = _GUTTER_RE.sub("", body)
        if not text.endswith("\n"):
            text += "\n"
        tree = self.parser.parse(text)
        return self.transformer.transform(tree)

    def parse_blocks(self, source: str, source_file: str = "<source>") -> List[DocBlock]:
        """All documentation comments in *source*, in order. Malformed ones are skipped."""
        blocks = []
        for match in _DOC_COMMENT_RE.finditer(source):
            try:
                blocks.append(self.parse_body(match.group(1)))
            except LarkError as e:
                logger.debug(f"Skipping unparseable doc comment in {source_file}: {e}")
        return blocks


_shared_parser: Optional[DocCommentParser] = None


def get_doc_comment_parser() -> DocCommentParser:
    """Shared parser instance (grammar compilation happens once per process)."""
    global _shared_parser
    if _shared_parser is None:
        _shared_parser = DocCommentParser()
    return _shared_parser
