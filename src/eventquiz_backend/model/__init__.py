from .base import Base, metadata
from .auth import User, Profile
from .role import AppRole, UserRole
from .quiz import Quiz, Question, LeaderboardEntry

# Import all models to ensure relationships are properly set up
from . import auth, role, quiz

__all__ = [
    'Base',
    'metadata',
    # Identity
    'User',
    'Profile',
    # Roles
    'AppRole',
    'UserRole',
    # Quiz content
    'Quiz',
    'Question',
    'LeaderboardEntry',
]
