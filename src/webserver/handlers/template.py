"""
Template token substitution for served text files.

Text files may contain two markers that are replaced every time the
file is served:

    <cs371date>     today's date, e.g. 2026-10-19
    <cs371server>   the configured server name

Replacement is literal: no escaping, and a replacement value is never
scanned again for tokens.
"""

from datetime import date
from typing import Mapping, Optional


DATE_TOKEN = "<cs371date>"
SERVER_TOKEN = "<cs371server>"


def substitute(line: str, tokens: Mapping[str, str]) -> str:
    """
    Replace every occurrence of each token in a line.

    Tokens are applied in mapping order.

        >>> substitute("Served by <cs371server>", {"<cs371server>": "Jon's"})
        "Served by Jon's"
    """
    for token, value in tokens.items():
        line = line.replace(token, value)
    return line


def template_tokens(server_name: str, today: Optional[date] = None) -> dict[str, str]:
    """
    Build the token mapping for one response.

    Args:
        server_name: Replacement for <cs371server>.
        today: Date for <cs371date>; defaults to the current local date.
    """
    if today is None:
        today = date.today()
    return {
        DATE_TOKEN: today.isoformat(),
        SERVER_TOKEN: server_name,
    }
