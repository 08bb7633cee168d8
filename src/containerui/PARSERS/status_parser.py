"""
Parsing of `system status` output.
"""

STATUS_MARKER = "apiserver is"
UNKNOWN_STATUS = "unknown"


def parse_system_status(text: str) -> str:
    """
    Extracts the apiserver status line.

    Args:
        text (str): Output of `system status`.

    Returns:
        str: The first line mentioning "apiserver is", trimmed, or "unknown".
    """
    for line in text.split("\n"):
        if STATUS_MARKER in line.lower():
            return line.strip()
    return UNKNOWN_STATUS


def is_system_running(text: str) -> bool:
    """
    Classifies a status text. Anything unrecognised counts as not running.

    Args:
        text (str): Status line or full `system status` output.

    Returns:
        bool: True only when the apiserver reports it is running.
    """
    lower = text.lower()
    if "apiserver is running" in lower:
        return True
    if "apiserver is not running" in lower:
        return False
    return False
