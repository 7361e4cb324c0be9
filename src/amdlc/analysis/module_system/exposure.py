"""
Module Exposure

Decides whether a module is published on the runtime's public surface
(the generated ``expose([...])`` call).
"""

import logging
from typing import Mapping, Optional, Union, Tuple

from .module_info import LibraryMapping
from .path_resolver import in_namespace
from ...frontend.doc_comments import DocCommentParser, get_doc_comment_parser

logger = logging.getLogger(__name__)

EXPOSE_PUBLIC = "public"

ExposeSetting = Union[bool, str, Tuple[str, ...]]


def normalize_id(module_id: str) -> str:
    return module_id.replace("/", ".")


class ExposurePolicy:
    """
    Exposure rules, per setting:

    - False: never exposed
    - list of ids: exposed iff listed
    - "public": exposed unless a doc comment whose @class/@name equals the id
      is marked @private
    - True: always exposed

    Ids inside a library namespace follow that library's own setting.
    """

    def __init__(
        self,
        expose: ExposeSetting = True,
        libs: Optional[Mapping[str, LibraryMapping]] = None,
        doc_parser: Optional[DocCommentParser] = None,
    ):
        self.expose = expose
        self.libs = dict(libs or {})
        self._doc_parser = doc_parser

    @classmethod
    def from_options(cls, options) -> "ExposurePolicy":
        return cls(expose=options.expose, libs=options.libs)

    @property
    def doc_parser(self) -> DocCommentParser:
        if self._doc_parser is None:
            self._doc_parser = get_doc_comment_parser()
        return self._doc_parser

    def effective_setting(self, module_id: str) -> ExposeSetting:
        for name in sorted(self.libs, key=len, reverse=True):
            if in_namespace(module_id, name):
                return self.libs[name].expose
        return self.expose

    def is_exposed(self, module_id: str, source: str, setting: Optional[ExposeSetting] = None) -> bool:
        if setting is None:
            setting = self.effective_setting(module_id)

        if setting is False:
            return False
        if isinstance(setting, (list, tuple)):
            return module_id in setting
        if setting == EXPOSE_PUBLIC:
            return not self._is_marked_private(module_id, source)
        return True

    def _is_marked_private(self, module_id: str, source: str) -> bool:
        wanted = normalize_id(module_id)
        for block in self.doc_parser.parse_blocks(source, module_id):
            subject = block.subject
            if subject is not None and normalize_id(subject) == wanted and block.is_private:
                logger.debug(f"Module {module_id} is marked private")
                return True
        return False
