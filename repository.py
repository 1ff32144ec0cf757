# repository.py

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Set

from sqlalchemy.orm import Session, joinedload
from sqlalchemy import func

from db import Channel, User, Video, WatchHistoryEntry

# Watching more than this share of a video marks it as finished
COMPLETION_RATIO = 0.95
MAX_HISTORY_ENTRIES = 100


class VideoRepository:
    def __init__(self, db: Session):
        self.db = db

    def _with_channel(self, query):
        return query.options(joinedload(Video.channel).joinedload(Channel.owner))

    def get_or_create_user(self, user_id: str) -> User:
        """
        Retrieves a user by ID or creates a new one if not found.

        Uses optimistic insertion with rollback to handle concurrent
        creation of the same user safely.
        """
        user = self.db.query(User).filter_by(user_id=user_id).one_or_none()

        if not user:
            user = User(user_id=user_id)
            self.db.add(user)
            try:
                self.db.flush()
            except Exception:
                self.db.rollback()
                user = self.db.query(User).filter_by(user_id=user_id).one()
        return user

    def get_active_video(self, video_id: int) -> Optional[Video]:
        return self.db.query(Video).filter_by(id=video_id, is_deleted=False).one_or_none()

    def get_eligible_videos(self, is_short: Optional[bool] = None) -> List[Dict[str, Any]]:
        """Returns engine records for every non-deleted video, optionally only shorts or long-form."""
        query = self.db.query(Video).filter(Video.is_deleted.is_(False))
        if is_short is not None:
            query = query.filter(Video.is_short.is_(is_short))
        return [video.to_dict() for video in query.order_by(Video.id).all()]

    def get_watched_video_ids(self, user_id: str) -> Set[int]:
        """Distinct ids of every video in the user's watch history."""
        rows = (
            self.db.query(WatchHistoryEntry.video_id)
            .join(User, WatchHistoryEntry.user_id == User.id)
            .filter(User.user_id == user_id)
            .distinct()
            .all()
        )
        return {row[0] for row in rows}

    def get_videos_by_ids(self, video_ids: Iterable[int]) -> List[Video]:
        """Loads videos with channel and owner, preserving the order of `video_ids`."""
        video_ids = list(video_ids)
        if not video_ids:
            return []

        videos = (
            self._with_channel(self.db.query(Video))
            .filter(Video.id.in_(video_ids))
            .filter(Video.is_deleted.is_(False))
            .all()
        )
        by_id = {video.id: video for video in videos}
        return [by_id[video_id] for video_id in video_ids if video_id in by_id]

    def get_trending_videos(self, is_short: bool, limit: int = 20) -> List[Video]:
        return (
            self._with_channel(self.db.query(Video))
            .filter(Video.is_deleted.is_(False))
            .filter(Video.is_short.is_(is_short))
            .order_by(Video.views.desc(), Video.id)
            .limit(limit)
            .all()
        )

    def get_catalog_version(self) -> str:
        """
        Changes whenever a video is inserted, edited or soft deleted.
        Deleted rows are counted on purpose: soft deletes bump updated_at.
        """
        count, last_update = self.db.query(func.count(Video.id), func.max(Video.updated_at)).one()
        stamp = last_update.isoformat() if last_update else "empty"
        return f"{count}:{stamp}"

    def get_history_version(self, user_id: str) -> str:
        """Changes whenever an entry is added to, moved within or removed from the user's history."""
        count, last_id, last_watched = (
            self.db.query(
                func.count(WatchHistoryEntry.id),
                func.max(WatchHistoryEntry.id),
                func.max(WatchHistoryEntry.watched_at),
            )
            .join(User, WatchHistoryEntry.user_id == User.id)
            .filter(User.user_id == user_id)
            .one()
        )
        stamp = last_watched.isoformat() if last_watched else "empty"
        return f"{count}:{last_id or 0}:{stamp}"

    def rollback(self) -> None:
        """Discards a failed transaction so the session can keep serving the request."""
        self.db.rollback()

    def add_to_history(self, user: User, video_id: int, progress: float = 0.0,
                       duration: Optional[float] = None) -> bool:
        """
        Moves `video_id` to the top of the user's watch history.

        A video watched past COMPLETION_RATIO is taken off the history instead.
        Returns True when the entry was removed that way.
        """
        self.db.query(WatchHistoryEntry).filter_by(
            user_id=user.id, video_id=video_id
        ).delete(synchronize_session=False)

        if progress and duration and progress / duration > COMPLETION_RATIO:
            self.db.commit()
            return True

        self.db.add(WatchHistoryEntry(
            user_id=user.id,
            video_id=video_id,
            progress=progress or 0.0,
            watched_at=datetime.utcnow(),
        ))
        self.db.flush()

        stale_ids = [
            row[0] for row in (
                self.db.query(WatchHistoryEntry.id)
                .filter_by(user_id=user.id)
                .order_by(WatchHistoryEntry.watched_at.desc(), WatchHistoryEntry.id.desc())
                .offset(MAX_HISTORY_ENTRIES)
                .all()
            )
        ]
        if stale_ids:
            self.db.query(WatchHistoryEntry).filter(
                WatchHistoryEntry.id.in_(stale_ids)
            ).delete(synchronize_session=False)

        self.db.commit()
        return False

    def get_watch_history(self, user_id: str) -> List[Video]:
        """Returns watched videos, most recent first, without duplicates or deleted videos."""
        entries = (
            self.db.query(WatchHistoryEntry)
            .join(User, WatchHistoryEntry.user_id == User.id)
            .filter(User.user_id == user_id)
            .options(
                joinedload(WatchHistoryEntry.video)
                .joinedload(Video.channel)
                .joinedload(Channel.owner)
            )
            .order_by(WatchHistoryEntry.watched_at.desc(), WatchHistoryEntry.id.desc())
            .all()
        )

        videos = []
        seen: Set[int] = set()
        for entry in entries:
            video = entry.video
            if video is None or video.is_deleted or video.id in seen:
                continue
            seen.add(video.id)
            videos.append(video)
        return videos
