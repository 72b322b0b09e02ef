"""
=============================================================================
RESPONSE BODY HANDLERS
=============================================================================

    static.py      BodyWriter: error page, welcome page, binary files,
                   templated text files
    template.py    <cs371date> / <cs371server> substitution

=============================================================================
"""

from .static import BodyWriter, NOT_FOUND_PAGE, WELCOME_PAGE
from .template import DATE_TOKEN, SERVER_TOKEN, substitute, template_tokens

__all__ = [
    "BodyWriter",
    "NOT_FOUND_PAGE",
    "WELCOME_PAGE",
    "DATE_TOKEN",
    "SERVER_TOKEN",
    "substitute",
    "template_tokens",
]
