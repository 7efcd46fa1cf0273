"""
Privacy filter for profile content.

Every profile section (education, experience, skills, links) and every
participation record carries its own privacy level. Visibility is a pure
function of who is looking, who owns the content, the level, and whether the
two are friends.
"""

from camboconnect.modules.users.models import PrivacyLevel


def can_view_content(
    viewer_id: str | None,
    owner_id: str,
    level: PrivacyLevel | str | None,
    is_friend: bool,
) -> bool:
    """
    Decide whether ``viewer_id`` may see content owned by ``owner_id``.

    - The owner always sees their own content.
    - PUBLIC content is visible to everyone, including anonymous viewers.
    - FRIENDS_ONLY content is visible to friends (either stored direction).
    - ONLY_ME, and any unrecognized level, is visible to the owner only.
    """
    if viewer_id is not None and viewer_id == owner_id:
        return True

    if level == PrivacyLevel.PUBLIC:
        return True

    if level == PrivacyLevel.FRIENDS_ONLY:
        return viewer_id is not None and is_friend

    return False


def needs_friendship_check(
    viewer_id: str | None,
    owner_id: str,
    levels: list[PrivacyLevel],
) -> bool:
    """Whether any of ``levels`` depends on the friendship relation for this viewer."""
    if viewer_id is None or viewer_id == owner_id:
        return False
    return PrivacyLevel.FRIENDS_ONLY in levels
