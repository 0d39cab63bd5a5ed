"""
Registration policy - Immutable rules applied to registrant input.

Built once at startup from settings and injected into the services,
so nothing here is mutated while requests are served.
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime

from .exceptions import InvalidBirthday
from .forbidden_words import FORBIDDEN_WORDS


def normalize_email(email: str) -> str:
    """
    Normalize email address for consistent storage and lookup.

    Applies: strip whitespace + lowercase
    """
    return email.strip().lower()


def capitalize_name(name: str) -> str:
    """Capitalize the first letter of each space-separated word."""
    return " ".join(word[:1].upper() + word[1:].lower() for word in name.split(" "))


def parse_birthday(value: date | datetime | str) -> date:
    """
    Coerce a birthday to a date.

    Accepts a date, a datetime or an ISO 8601 string
    (``1990-05-17`` or ``1990-05-17T00:00:00.000Z``).

    Raises:
        InvalidBirthday: If the value is not a valid date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        raise InvalidBirthday() from None


def age_on(birthday: date, today: date) -> int:
    """Full years elapsed between birthday and today."""
    age = today.year - birthday.year
    if (today.month, today.day) < (birthday.month, birthday.day):
        age -= 1
    return age


@dataclass(frozen=True)
class RegistrationPolicy:
    """Rules for accepting a registration."""

    forbidden_words: tuple[str, ...] = FORBIDDEN_WORDS
    min_age: int = 16
    _whole_word: re.Pattern[str] | None = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        words = tuple(w.strip().lower() for w in self.forbidden_words if w.strip())
        object.__setattr__(self, "forbidden_words", words)
        pattern = None
        if words:
            pattern = re.compile(
                r"\b(" + "|".join(re.escape(w) for w in words) + r")\b", re.IGNORECASE
            )
        object.__setattr__(self, "_whole_word", pattern)

    def username_is_forbidden(self, username: str) -> bool:
        """Strict check: any forbidden word appearing as a substring."""
        lowered = username.lower()
        return any(word in lowered for word in self.forbidden_words)

    def name_is_forbidden(self, name: str | None) -> bool:
        """Lenient check for first/last names: whole words only."""
        if not name or self._whole_word is None:
            return False
        return self._whole_word.search(name) is not None

    def is_underage(self, birthday: date, today: date) -> bool:
        return age_on(birthday, today) < self.min_age
