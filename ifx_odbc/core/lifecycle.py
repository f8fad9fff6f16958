"""Ownership tree shared by Connection, Statement and ResultSet.

Every resource owns its children and closes them, deepest first, before
releasing its own native handle. Closing is idempotent. A child keeps a
reference to its owner for introspection only; it never closes its owner.
"""

from __future__ import annotations

import itertools
import logging
from typing import Any

from ifx_odbc.core.exceptions import ClosedResourceError

logger = logging.getLogger(__name__)

# Process-wide source of handle names (conn1, stmt2, rs3, ...).
_handle_ids = itertools.count(1)


class Resource:
    """Base class for closable, owned resources."""

    kind = "resource"
    prefix = "res"

    def __init__(self, owner: Resource | None = None) -> None:
        self._name = f"{self.prefix}{next(_handle_ids)}"
        self._owner = owner
        self._children: list[Resource] = []
        self._closed = False
        if owner is not None:
            owner._adopt(self)

    @property
    def name(self) -> str:
        """Unique handle name of this resource."""
        return self._name

    @property
    def closed(self) -> bool:
        return self._closed

    def _adopt(self, child: Resource) -> None:
        self._check_open()
        self._children.append(child)

    def _forget(self, child: Resource) -> None:
        try:
            self._children.remove(child)
        except ValueError:
            pass

    def _check_open(self) -> None:
        if self._closed:
            raise ClosedResourceError(self.kind, self._name)

    def _release(self) -> None:
        """Release the native handle. Called exactly once."""

    def close(self) -> None:
        """Close children, then release the native handle. Safe to repeat."""
        if self._closed:
            return
        # Mark first so children do not try to detach from a closing owner.
        self._closed = True
        for child in list(self._children):
            child.close()
        self._children.clear()
        try:
            self._release()
        finally:
            if self._owner is not None and not self._owner._closed:
                self._owner._forget(self)
            logger.debug("Closed %s %s", self.kind, self._name)

    def __enter__(self) -> Any:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<{type(self).__name__} {self._name} ({state})>"
