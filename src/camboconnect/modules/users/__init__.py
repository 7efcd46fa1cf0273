"""
Users module - Profiles, friendships and participations.
"""

from camboconnect.modules.users.models import Friendship, Participation, PrivacyLevel, User
from camboconnect.modules.users.repository import UserRepository

__all__ = ["Friendship", "Participation", "PrivacyLevel", "User", "UserRepository"]
