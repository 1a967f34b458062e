"""In-memory group repository with JSON persistence.

Groups are the aggregate root: a group owns its competitions, which own
their matches. The engine reads a group, works on a deep copy and hands the
copy back through `save_group`, so a failed operation never leaves a
half-applied change behind.
"""

import logging
from pathlib import Path
from typing import Iterator, Optional

from .schemas import Competition, Group, Match, StoreFile
from .utils import load_json, save_json

logger = logging.getLogger('matchday.store')


class GroupStore:
    """Groups keyed by id."""

    def __init__(self, groups: Optional[list[Group]] = None):
        self._groups: dict[str, Group] = {}
        for group in groups or []:
            self._groups[group.id] = group

    def __len__(self) -> int:
        return len(self._groups)

    def __iter__(self) -> Iterator[Group]:
        return iter(self._groups.values())

    def get_group(self, group_id: str) -> Optional[Group]:
        return self._groups.get(group_id)

    def save_group(self, group: Group) -> None:
        """Insert or replace a group."""
        self._groups[group.id] = group

    def find_group_by_invite(self, invite_code: str) -> Optional[Group]:
        code = invite_code.strip().upper()
        for group in self._groups.values():
            if group.invite_code.upper() == code:
                return group
        return None

    def find_competition(self, competition_id: str) -> Optional[tuple[Group, Competition]]:
        """Locate a competition and its owning group."""
        for group in self._groups.values():
            for competition in group.competitions:
                if competition.id == competition_id:
                    return group, competition
        return None

    def find_match(self, match_id: str) -> Optional[tuple[Group, Competition, Match]]:
        """Locate a match together with its competition and group."""
        for group in self._groups.values():
            for competition in group.competitions:
                match = competition.find_match(match_id)
                if match is not None:
                    return group, competition, match
        return None

    def to_file(self) -> StoreFile:
        return StoreFile(groups=list(self._groups.values()))

    def save(self, path: Path | str) -> None:
        """Write every group to a JSON file."""
        save_json(path, self.to_file())
        logger.info(f'Saved {len(self)} group(s) to {path}')

    @classmethod
    def load(cls, path: Path | str) -> 'GroupStore':
        """
        Read a store written by `save`.

        Raises:
            FileNotFoundError: If the file doesn't exist
            json.JSONDecodeError: If the JSON is malformed
            ValueError: If the contents fail schema validation
        """
        store_file = load_json(path, schema=StoreFile)
        logger.info(f'Loaded {len(store_file.groups)} group(s) from {path}')
        return cls(store_file.groups)
