"""Text transformations applied to post bodies on their way in and out."""

import re
from urllib.parse import unquote

# The blog service appends this link to rendered post bodies
DISCUSS_FOOTER_RE = re.compile(r'\n\n<a href="[^"\n]*">Discuss\.\.\.</a> ?\Z')

# Link destination right after "](": <bracketed> or bare, ended by a title or ")"
LINK_DEST_RE = re.compile(r"(\]\([ \t]*)(<[^<>\n]*>|[^\s()<>]+)(?=[ \t\n]|\))")


def rewrite_links(content: str, links: dict[str, str]) -> str:
    """
    Replace link destinations found in ``links`` with their new value.

    Keys are percent-decoded destinations.  A destination matches whatever
    way it is written: percent-encoded, in angle brackets or followed by a
    link title.  The title and the brackets are kept, and new values
    containing whitespace are bracketed.
    """
    if not links:
        return content

    def _replace(match: re.Match) -> str:
        dest = match.group(2)
        bracketed = dest.startswith("<")
        new = links.get(unquote(dest[1:-1] if bracketed else dest))
        if new is None:
            return match.group(0)
        if bracketed or re.search(r"\s", new):
            new = f"<{new}>"
        return match.group(1) + new

    return LINK_DEST_RE.sub(_replace, content)


def strip_discuss_footer(content: str) -> str:
    """Remove the trailing "Discuss..." link added by the blog service."""
    return DISCUSS_FOOTER_RE.sub("", content, count=1)


def strip_title(content: str, title: str) -> str:
    """Remove the first ``# <title>`` line; the title travels separately."""
    if not title:
        return content
    return content.replace(f"# {title}\n", "", 1)


def prepend_title(content: str, title: str) -> str:
    """Put the title back as a level-1 heading unless it is blank."""
    if not title.strip():
        return content
    return f"# {title}\n{content}"
