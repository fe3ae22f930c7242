def is_owner(*, actor_id, owner_id) -> bool:
    """Return True if the actor owns the resource.

    Ids are compared as strings: the token subject arrives as text while
    owners are usually stored as integers.
    """
    return str(actor_id) == str(owner_id)
