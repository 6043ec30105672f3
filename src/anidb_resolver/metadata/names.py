"""Person name normalization."""

__all__ = ["reverse_name_order", "normalize_person_name"]


def reverse_name_order(name: str) -> str:
    """Reverse space-separated name tokens ("Kana Hanazawa" -> "Hanazawa Kana").

    AniDB stores most names family-name first; the host expects given name
    first. This applies to every name regardless of the person's nationality.
    """
    return " ".join(reversed(name.split())).strip()


def normalize_person_name(name: str) -> str:
    """Name-order policy applied to every person the parser emits."""
    # TODO: only reverse for people whose AniDB record is Japanese once the
    # creator nationality is available from the person endpoint.
    return reverse_name_order(name)
