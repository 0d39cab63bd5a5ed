"""Built-in list of words refused in usernames and names."""

FORBIDDEN_WORDS: tuple[str, ...] = (
    "abruti",
    "batard",
    "bâtard",
    "bordel",
    "connard",
    "connasse",
    "couille",
    "cretin",
    "crétin",
    "debile",
    "débile",
    "encule",
    "enculé",
    "enfoire",
    "enfoiré",
    "fdp",
    "hitler",
    "merde",
    "nazi",
    "niquer",
    "ntm",
    "pouffiasse",
    "putain",
    "salaud",
    "salope",
)
