"""Core value types shared across the message model."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class EmailAddress:
    """A mailbox address decoded from an address header record."""

    mailbox: str
    host: str | None = None
    name: str | None = None

    @property
    def address(self) -> str:
        """Return ``mailbox@host``, or the bare mailbox for local addresses."""
        if self.host is None:
            return self.mailbox
        return f"{self.mailbox}@{self.host}"

    @property
    def full_address(self) -> str:
        """Return the address with its display name, RFC 5322 style."""
        if not self.name:
            return self.address
        escaped = self.name.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}" <{self.address}>'

    def __str__(self) -> str:
        return self.full_address


__all__ = ["EmailAddress"]
