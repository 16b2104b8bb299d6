"""Playlist planning for the media files found next to the current file."""

import logging
import os
from pathlib import Path
from typing import Protocol

from .cancellation import CancellationToken, Cancelled
from .models import FileRecord, PlaylistInsertion, PlaylistState

logger = logging.getLogger(__name__)


class PlaylistController(Protocol):
    """Protocol for the player's playlist."""

    def add(self, path: Path) -> None:
        """Append a file to the end of the playlist."""
        ...

    def move(self, from_index: int, to_index: int) -> bool:
        """Move an entry; returns False if the player rejected the move."""
        ...


def plan_playlist(media: list[FileRecord], state: PlaylistState) -> list[PlaylistInsertion]:
    """
    Plan the playlist additions for the media files of a directory.

    Files sorted before the current one are inserted in front of it so the
    playlist keeps directory order around the playing entry; files after it
    are appended. The current file is already in the playlist and is skipped.

    Args:
        media: Videos followed by audio files, each in natural order
        state: The playlist as it is when the run starts

    Returns:
        Insertions to replay in order
    """
    current = Path(os.path.abspath(state.current_path)) if state.current_path else None
    count = state.count
    position = state.position
    seen_current = False
    plan: list[PlaylistInsertion] = []

    for record in media:
        if current is not None and record.path == current:
            seen_current = True
            continue
        if seen_current or current is None:
            plan.append(PlaylistInsertion(path=record.path))
        else:
            plan.append(PlaylistInsertion(path=record.path, move_from=count, move_to=position))
            # the playing entry shifts down by the inserted one
            position += 1
        count += 1

    logger.debug(f"Planned {len(plan)} playlist insertions")
    return plan


def apply_playlist(
    plan: list[PlaylistInsertion],
    controller: PlaylistController,
    token: CancellationToken,
) -> int | Cancelled:
    """
    Replay a playlist plan on the player.

    Stops early if the player rejects a move.

    Returns:
        Number of files added, or Cancelled if the ticket expired
    """
    added = 0
    for insertion in plan:
        cancelled = token.check("playlist")
        if cancelled:
            return cancelled
        controller.add(insertion.path)
        added += 1
        if insertion.move_to is not None and insertion.move_from is not None:
            if not controller.move(insertion.move_from, insertion.move_to):
                logger.warning(f"Playlist rejected moving {insertion.path}; stopping")
                break
    return added
