import ulid


def new_id(prefix: str = "") -> str:
    """
    Generate a sortable string id backed by a ULID.
    Some ulid releases expose `.str` and others only convert via str(...).
    """
    u = ulid.new()
    s = getattr(u, "str", None)
    if not s:
        s = str(u)
    return prefix + s
