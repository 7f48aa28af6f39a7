"""Parsing of GitHub issue and discussion URLs."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit

from issue_creator.repository.exceptions import InvalidTicketURLError
from issue_creator.repository.models import TicketKind


@dataclass(frozen=True)
class TicketRef:
    """Location of a ticket parsed from its URL."""

    owner: str
    repository: str
    kind: TicketKind
    number: int


def parse_ticket_url(url: str) -> TicketRef:
    """Split ``https://github.com/<owner>/<repo>/<issues|discussions>/<number>``.

    Raises:
        InvalidTicketURLError: If the URL has any other shape.
    """
    try:
        path = urlsplit(url).path
    except ValueError as e:
        raise InvalidTicketURLError(f"Invalid ticket URL {url!r}: {e}") from e

    segments = path.strip("/").split("/")
    if len(segments) != 4 or not all(segments):
        raise InvalidTicketURLError(f"Invalid ticket URL {url!r}: unexpected path {path!r}")

    owner, repository, kind, number = segments
    try:
        ticket_kind = TicketKind(kind)
    except ValueError:
        raise InvalidTicketURLError(
            f"Invalid ticket URL {url!r}: expected issues or discussions, got {kind!r}"
        ) from None
    if not number.isdigit():
        raise InvalidTicketURLError(f"Invalid ticket URL {url!r}: {number!r} is not a number")

    return TicketRef(owner=owner, repository=repository, kind=ticket_kind, number=int(number))
