"""Message sources usable in place of a live server connection."""

from .rfc822 import Rfc822MessageSource, resolve_section, structure_from_message

__all__ = ["Rfc822MessageSource", "resolve_section", "structure_from_message"]
