NO_RELATION = "no_relation"
ONE_SIDED_LIKE = "one_sided_like"
MUTUAL_LIKE = "mutual_like"
MATCHED = "matched"


def pair_state(a_likes_b: bool, b_likes_a: bool, match_exists: bool) -> str:
    if a_likes_b and b_likes_a:
        return MATCHED if match_exists else MUTUAL_LIKE
    if a_likes_b or b_likes_a:
        return ONE_SIDED_LIKE
    return NO_RELATION


def transition_pair(current: str, action: str) -> str:
    if action == "like":
        if current == NO_RELATION:
            return ONE_SIDED_LIKE
        if current == ONE_SIDED_LIKE:
            return MUTUAL_LIKE
        return current

    if action == "match":
        if current == MUTUAL_LIKE:
            return MATCHED
        return current

    if action == "unlike":
        # The match goes with the like; there is no matched state without both likes.
        if current in {MUTUAL_LIKE, MATCHED}:
            return ONE_SIDED_LIKE
        if current == ONE_SIDED_LIKE:
            return NO_RELATION
        return current

    return current
