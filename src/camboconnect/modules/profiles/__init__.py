"""
Profiles Module

Privacy-aware profile views. Each profile section (education, experience,
skills, links) and each participation has its own privacy level
(PUBLIC, FRIENDS_ONLY, ONLY_ME), checked against the viewer per request.
"""

from .router import router

__all__ = ["router"]
