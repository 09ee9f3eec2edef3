"""Output that drops everything it is given."""

from __future__ import annotations

from typing import Any


class NullOutput:
    """Output used for debugging: accepts messages and writes nothing."""

    def plugin_write(self, msg: Any) -> int:
        """Accept a message and report its full size as written."""
        return len(msg.data) + len(msg.meta)

    def __str__(self) -> str:
        return "Null Output"