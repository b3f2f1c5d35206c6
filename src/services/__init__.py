"""
Use cases: fetch, decide, mutate-and-persist.
"""

from src.services.board_service import BoardService
from src.services.circle_service import CircleService
from src.services.comment_service import CommentService
from src.services.locker_service import LockerService
from src.services.post_service import PostService

__all__ = [
    "BoardService",
    "CircleService",
    "CommentService",
    "LockerService",
    "PostService",
]
