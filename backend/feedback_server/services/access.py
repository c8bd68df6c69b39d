"""Visibility of an idea: ``public``, ``private:<user_id>`` or ``group:<group_id>``."""

from dataclasses import dataclass
from enum import StrEnum


class AccessKind(StrEnum):
    PUBLIC = "public"
    PRIVATE = "private"
    GROUP = "group"


@dataclass(frozen=True)
class Access:
    kind: AccessKind
    subject: str | None = None

    @classmethod
    def parse(cls, raw: str) -> "Access":
        """Parse the stored string form; raise ValueError when malformed."""
        value = raw.strip()
        if value == AccessKind.PUBLIC:
            return cls(AccessKind.PUBLIC)
        prefix, sep, subject = value.partition(":")
        if not sep or prefix not in (AccessKind.PRIVATE, AccessKind.GROUP) or not subject:
            raise ValueError(
                f"Unrecognised access {raw!r}: expected 'public', 'private:<id>' or 'group:<id>'"
            )
        return cls(AccessKind(prefix), subject)

    def __str__(self) -> str:
        if self.kind is AccessKind.PUBLIC:
            return AccessKind.PUBLIC.value
        return f"{self.kind.value}:{self.subject}"


PUBLIC = Access(AccessKind.PUBLIC)


def is_restricted_value(raw: str) -> bool:
    """True when *raw* has the ``private:`` or ``group:`` prefix, whatever follows it.

    Used for listing filters, which match stored values verbatim and do not
    require a well-formed id.
    """
    return raw.startswith((f"{AccessKind.PRIVATE}:", f"{AccessKind.GROUP}:"))
