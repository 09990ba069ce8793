"""Sanitizing reviver for untrusted schema documents.

Documents are fetched from arbitrary URLs, so every key and every string
value is checked before anything else reads the tree:

- Keys must match LEGAL_KEY (or be allow-listed). Keys become identifiers
  and lookups downstream and cannot be altered, so a bad key rejects the
  whole document.
- String values run through an ordered chain of sanitizers. The first
  sanitizer that applies produces the replacement. Values never raise.

The reviver is a pure transform: it returns a new tree and leaves its input
untouched.
"""

import logging
import re
from collections.abc import Callable, Iterable
from typing import Any

from kubeimport.errors import IllegalKeyError

logger = logging.getLogger(__name__)

# the string illegal values are replaced with
STRIPPED_VALUE = "__stripped_by_kubeimport__"

# .  resource fqn used as a key (io.k8s.apimachinery.pkg.apis.meta.v1.APIGroup)
# /  and #  $ref pointers (#/definitions/io.k8s...)
# -  annotation keys (x-kubernetes-group-version-kind)
# ,  list-like values (merge,retainKeys)
LEGAL_KEY = re.compile(r"^[\w./#,-]*$", re.ASCII)
LEGAL_VALUE = LEGAL_KEY

# enum members are data, not names, so spaces and a few operators are fine
LEGAL_ENUM_VALUE = re.compile(r"^[\w./#,\- +:*]*$", re.ASCII)

Path = tuple[str, ...]

# returns None when not applicable, otherwise the replacement value
Sanitizer = Callable[[Path, str], str | None]


def description_sanitizer(path: Path, value: str) -> str | None:
    """Neutralize comment terminators inside ``description`` values."""
    if not path or path[-1] != "description":
        return None
    return value.replace("*/", "_/")


_META_SCHEMA_URI = re.compile(r"^https?://[\w./-]+#?$", re.ASCII)


def meta_schema_sanitizer(path: Path, value: str) -> str | None:
    """Keep well-formed ``$schema`` URIs (``http://json-schema.org/draft-07/schema#``)."""
    if not path or path[-1] != "$schema":
        return None
    return value if _META_SCHEMA_URI.fullmatch(value) else None


def _is_enum_member(path: Path) -> bool:
    return len(path) >= 2 and path[-2] == "enum" and path[-1].isdigit()


def legal_char_sanitizer(path: Path, value: str) -> str | None:
    """Replace values outside the legal character set with STRIPPED_VALUE."""
    if LEGAL_VALUE.fullmatch(value):
        return value

    if _is_enum_member(path) and LEGAL_ENUM_VALUE.fullmatch(value):
        return value

    logger.debug("Stripped value at %s", "/".join(path))
    return STRIPPED_VALUE


DEFAULT_SANITIZERS: tuple[Sanitizer, ...] = (description_sanitizer, legal_char_sanitizer)


class SafeReviver:
    """Applies the key and value policies to a parsed document tree.

    Args:
        allowlisted_keys: Keys accepted regardless of LEGAL_KEY (e.g. "$ref")
        sanitizers: Ordered value sanitizers
    """

    def __init__(
        self,
        allowlisted_keys: Iterable[str] = (),
        sanitizers: Iterable[Sanitizer] = DEFAULT_SANITIZERS,
    ) -> None:
        self.allowlisted_keys = frozenset(allowlisted_keys)
        self.sanitizers = tuple(sanitizers)

    def sanitize(self, tree: Any) -> Any:
        """Return a sanitized copy of ``tree``.

        Raises:
            IllegalKeyError: If any key violates the key policy
        """
        return self._revive(tree, ())

    def _revive(self, node: Any, path: Path) -> Any:
        if isinstance(node, dict):
            revived = {}
            for key, value in node.items():
                self._check_key(key, path)
                revived[key] = self._revive(value, path + (key,))
            return revived

        if isinstance(node, list):
            return [self._revive(item, path + (str(i),)) for i, item in enumerate(node)]

        if isinstance(node, str):
            return self._sanitize_value(path, node)

        return node

    def _check_key(self, key: Any, path: Path) -> None:
        if not isinstance(key, str):
            raise IllegalKeyError(key, path, LEGAL_KEY.pattern)
        if key in self.allowlisted_keys:
            return
        if not LEGAL_KEY.fullmatch(key):
            raise IllegalKeyError(key, path, LEGAL_KEY.pattern)

    def _sanitize_value(self, path: Path, value: str) -> str:
        for sanitizer in self.sanitizers:
            replacement = sanitizer(path, value)
            if replacement is not None:
                return replacement
        return value
