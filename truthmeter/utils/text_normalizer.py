import re

# C0 controls and DEL; newlines and tabs are handled separately for multi-line text
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_CONTROL_CHARS_MULTILINE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def normalize_nickname(nickname: str) -> str:
    """Fold a nickname for uniqueness checks and lookups.

    Args:
        nickname: Nickname as typed by the user.

    Returns:
        str: Trimmed, lower-cased nickname ("" for non-strings).
    """
    if not isinstance(nickname, str):
        return ""
    return nickname.strip().lower()


def normalize_line_breaks(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def has_control_chars(text: str, *, allow_newlines: bool = False) -> bool:
    """Return True when ``text`` contains characters a secret may not carry.

    With ``allow_newlines`` line feeds, carriage returns and tabs are accepted.
    """
    pattern = _CONTROL_CHARS_MULTILINE if allow_newlines else _CONTROL_CHARS
    return pattern.search(text) is not None
