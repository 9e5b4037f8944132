"""Round filtering, pagination and sorting for list views."""
from dataclasses import dataclass
from datetime import datetime
from typing import Generic, Iterable, Optional, Sequence, TypeVar

from matchday.models.entities import Fixture, Injury, Standing, VenueRecord

T = TypeVar("T")


@dataclass
class Page(Generic[T]):
    """One page of a list; ``page`` is 1-based and always in range."""
    items: list[T]
    page: int
    page_size: int
    total_items: int
    total_pages: int

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def start_index(self) -> int:
        """1-based index of the first item shown, 0 when empty."""
        if not self.items:
            return 0
        return (self.page - 1) * self.page_size + 1

    @property
    def end_index(self) -> int:
        return self.start_index + len(self.items) - 1 if self.items else 0


def available_rounds(fixtures: Iterable[Fixture]) -> list[int]:
    return sorted({f.round_number for f in fixtures if f.round_number is not None})


def filter_by_rounds(fixtures: Sequence[Fixture], rounds: Optional[Iterable[int]]) -> list[Fixture]:
    """Fixtures whose round is in ``rounds``; an empty selection keeps everything."""
    selected = set(rounds or [])
    if not selected:
        return list(fixtures)
    return [f for f in fixtures if f.round_number in selected]


def latest_rounds(fixtures: Iterable[Fixture], n: int) -> list[int]:
    if n <= 0:
        return []
    return available_rounds(fixtures)[-n:]


def paginate(items: Sequence[T], page: int, page_size: int) -> Page[T]:
    if page_size < 1:
        raise ValueError(f"page_size must be positive, got {page_size}")

    total = len(items)
    total_pages = max(1, -(-total // page_size))
    page = min(max(page, 1), total_pages)
    start = (page - 1) * page_size

    return Page(
        items=list(items[start:start + page_size]),
        page=page,
        page_size=page_size,
        total_items=total,
        total_pages=total_pages,
    )


def sort_standings(rows: Iterable[Standing], key: str = "rank") -> list[Standing]:
    """Sort by league rank, or by goal difference (points then rank break ties)."""
    if key == "rank":
        return sorted(rows, key=lambda s: s.rank)
    if key == "goal_diff":
        return sorted(rows, key=lambda s: (-s.goal_diff, -s.points, s.rank))
    raise ValueError(f"Unknown standings sort key: {key}")


def venue_table(rows: Iterable[Standing], side: str, limit: int = 10) -> list[tuple[Standing, VenueRecord]]:
    """Best home (or away) records by points from that venue; rows without one are skipped."""
    if side not in ("home", "away"):
        raise ValueError(f"Unknown venue side: {side}")
    records = [(s, getattr(s, f"{side}_record")) for s in rows]
    records = [(s, r) for s, r in records if r is not None]
    records.sort(key=lambda pair: -pair[1].points)
    return records[:limit]


def find_team_standing(rows: Iterable[Standing], team_id) -> Optional[Standing]:
    """Standings row for a team; ids compare as strings."""
    wanted = str(team_id)
    for s in rows:
        row_id = s.team_id if s.team_id is not None else (s.team.id if s.team else None)
        if row_id is not None and str(row_id) == wanted:
            return s
    return None


def _injury_date(injury: Injury) -> Optional[datetime]:
    return injury.reported_date or injury.created_at


def sort_injuries(injuries: Iterable[Injury]) -> list[Injury]:
    """Most recently reported first; undated injuries last."""
    injuries = list(injuries)
    dated = [i for i in injuries if _injury_date(i) is not None]
    undated = [i for i in injuries if _injury_date(i) is None]
    dated.sort(key=lambda i: _injury_date(i).timestamp(), reverse=True)
    return dated + undated


def split_by_prediction(fixtures: Iterable[Fixture]) -> tuple[list[Fixture], list[Fixture]]:
    """Return (predicted, unpredicted), preserving order."""
    predicted, unpredicted = [], []
    for f in fixtures:
        (predicted if f.has_prediction else unpredicted).append(f)
    return predicted, unpredicted


def group_injuries_by_team(injuries: Iterable[Injury]) -> dict[str, list[Injury]]:
    grouped: dict[str, list[Injury]] = {}
    for injury in sort_injuries(injuries):
        team = injury.team.name if injury.team else "Unknown"
        grouped.setdefault(team, []).append(injury)
    return grouped
