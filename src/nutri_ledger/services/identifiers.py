"""Entry identifier generation."""

import secrets
import time
from collections.abc import Callable
from dataclasses import dataclass, field

_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


def _wall_clock_ms() -> int:
    return time.time_ns() // 1_000_000


def to_base36(value: int) -> str:
    """Encode a non-negative integer in lowercase base 36."""
    if value < 0:
        raise ValueError("value must be non-negative")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_ALPHABET[remainder])
    return "".join(reversed(digits))


@dataclass
class EntryIdGenerator:
    """Generates compact ids from a strictly increasing clock plus randomness.

    The clock component never repeats within a process, even when the wall
    clock stalls or steps backwards.
    """

    clock_ms: Callable[[], int] = _wall_clock_ms
    random_chars: int = 8
    _last_ms: int = field(default=-1, init=False, repr=False)

    def new_id(self) -> str:
        """Return a new identifier."""
        now = self.clock_ms()
        if now <= self._last_ms:
            now = self._last_ms + 1
        self._last_ms = now
        suffix = "".join(secrets.choice(_ALPHABET) for _ in range(self.random_chars))
        return f"{to_base36(now)}{suffix}"


_default_generator = EntryIdGenerator()


def new_entry_id() -> str:
    """Return a new identifier from the process-wide generator."""
    return _default_generator.new_id()
