MIN_RATING = 1
MAX_RATING = 5


def is_valid_rating(rating) -> bool:
    return isinstance(rating, int) and not isinstance(rating, bool) and MIN_RATING <= rating <= MAX_RATING
