from .user import User, UserRole
from .dream import Dream
from .like import Like
from .favorite import Favorite
from .comment import Comment
from .dream_analysis import DreamAnalysis
from .rating import Rating

__all__ = [
    "User",
    "UserRole",
    "Dream",
    "Like",
    "Favorite",
    "Comment",
    "DreamAnalysis",
    "Rating",
]
