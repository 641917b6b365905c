"""
Person Records
==============

Commands such as "add" and "update" carry a full person record in
addition to their arguments. The record is read field by field from
the session's current input source, so a script can embed it on the
lines right after the command:

    add
    Ada Lovelace
    165
    1815-12-10
    AL-1815

Field Rules
-----------
    name         non-empty text
    height       whole number of centimetres, > 0
    birthday     ISO date, YYYY-MM-DD
    passport_id  non-empty text, at most 40 characters

Interactive users get a prompt per field and up to `max_attempts`
tries per field. Inside a script there is nobody to correct a typo,
so a bad value fails the command at once.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Any, Callable, Union

from shell_commands.errors import CommandError, ErrorKind, argument_type_mismatch

if TYPE_CHECKING:
    from shell_commands.dispatcher import SessionContext


MAX_PASSPORT_ID_LENGTH = 40


@dataclass(frozen=True)
class PersonRecord:
    """A person as sent to the collection server."""
    name: str
    height: int
    birthday: date
    passport_id: str

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready form for the request payload."""
        return {
            "name": self.name,
            "height": self.height,
            "birthday": self.birthday.isoformat(),
            "passport_id": self.passport_id,
        }


# ─── Field parsers ──────────────────────────────────────────────────
# Each takes the stripped input line and raises ValueError with a
# message fit for the user.

def parse_name(text: str) -> str:
    if not text:
        raise ValueError("Name can't be empty.")
    return text


def parse_height(text: str) -> int:
    try:
        height = int(text)
    except ValueError:
        raise ValueError(f"Height must be a whole number, got '{text}'.") from None
    if height <= 0:
        raise ValueError("Height must be greater than 0.")
    return height


def parse_birthday(text: str) -> date:
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise ValueError(f"Birthday must be a date in YYYY-MM-DD format, got '{text}'.") from None


def parse_passport_id(text: str) -> str:
    if not text:
        raise ValueError("Passport ID can't be empty.")
    if len(text) > MAX_PASSPORT_ID_LENGTH:
        raise ValueError(f"Passport ID must be at most {MAX_PASSPORT_ID_LENGTH} characters.")
    return text


PERSON_FIELDS: tuple[tuple[str, str, Callable[[str], Any]], ...] = (
    ("name", "Enter name: ", parse_name),
    ("height", "Enter height (cm): ", parse_height),
    ("birthday", "Enter birthday (YYYY-MM-DD): ", parse_birthday),
    ("passport_id", "Enter passport ID: ", parse_passport_id),
)


class RecordReader:
    """Reads a PersonRecord from the session's current input source."""

    def __init__(self, max_attempts: int = 3):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts

    def read(self, context: "SessionContext") -> Union[PersonRecord, CommandError]:
        """Read every field in order.

        Returns
        -------
        PersonRecord or CommandError
            ARGUMENT_COUNT_MISMATCH if the input ends mid-record,
            ARGUMENT_TYPE_MISMATCH if a field is still invalid after
            the allowed attempts.
        """
        values = {}
        for field_name, prompt, parser in PERSON_FIELDS:
            value = self._read_field(context, prompt, parser)
            if isinstance(value, CommandError):
                return value
            values[field_name] = value
        return PersonRecord(**values)

    def _read_field(self, context: "SessionContext", prompt: str,
                    parser: Callable[[str], Any]) -> Any:
        attempts = 1 if context.scripted else self.max_attempts
        problem = ""
        for _ in range(attempts):
            context.display.prompt(prompt)
            line = context.read_line()
            if line is None:
                return CommandError(ErrorKind.ARGUMENT_COUNT_MISMATCH, "record input ended early")
            try:
                return parser(line.strip())
            except ValueError as e:
                problem = str(e)
                context.display.show(problem, suppress_when_scripted=True, is_error=True)
        return argument_type_mismatch(problem)
