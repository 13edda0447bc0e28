"""
Public naming convention for tools and parameters

    to_public_name("active_user_profiles") -> "activeUserProfiles"
    to_public_name("add_note_to_user")     -> "addNoteToUser"
    to_public_name("p_user_id")            -> "pUserId"
"""


def to_public_name(identifier: str) -> str:
    """
    Convert a catalog identifier (snake_case) to the public camelCase form.

    Split on underscores, lower-case the first segment, upper-case the first
    letter of every following segment and concatenate. Empty segments from
    leading, trailing or doubled underscores are dropped.
    """
    segments = [segment for segment in identifier.split("_") if segment]
    if not segments:
        return identifier

    head, *rest = segments
    return head.lower() + "".join(segment[:1].upper() + segment[1:] for segment in rest)
