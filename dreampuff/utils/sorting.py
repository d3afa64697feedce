def name_sort_key(name: str):
    """
    Sort key for display names: case-insensitive, lowercase first on ties.

    Gives "A" < "b" < "B" < "baby puff" < "Puff Cokelat".
    """
    return name.casefold(), name.swapcase()
