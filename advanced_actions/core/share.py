"""Share targets listed by the share-post popup."""

from dataclasses import dataclass
from typing import Dict, List, Optional
from urllib.parse import quote, urlencode

from advanced_actions.core.post_context import PostContext

COPY_LINK = "copy-link"


@dataclass(frozen=True)
class ShareLink:
    """One entry of the share popup. ``key == "copy-link"`` copies ``url`` instead of opening it."""

    key: str
    label: str
    url: str

    @property
    def is_copy(self) -> bool:
        return self.key == COPY_LINK

    def to_dict(self) -> Dict[str, str]:
        return {"key": self.key, "label": self.label, "url": self.url}


def _query(**params: str) -> str:
    return urlencode(params, quote_via=quote)


def share_links(post_context: Optional[PostContext]) -> List[ShareLink]:
    """Share targets for the post, in display order. Empty without a post link."""
    if post_context is None or not post_context.post_link:
        return []
    link = post_context.post_link
    title = post_context.post_title

    return [
        ShareLink("facebook", "Facebook", "https://www.facebook.com/sharer/sharer.php?" + _query(u=link)),
        ShareLink("twitter", "Twitter", "https://twitter.com/intent/tweet?" + _query(url=link, text=title)),
        ShareLink(
            "linkedin",
            "LinkedIn",
            "https://www.linkedin.com/sharing/share-offsite/?" + _query(url=link),
        ),
        ShareLink(
            "whatsapp",
            "WhatsApp",
            "https://api.whatsapp.com/send?" + _query(text=f"{title} {link}".strip()),
        ),
        ShareLink("telegram", "Telegram", "https://t.me/share/url?" + _query(url=link, text=title)),
        ShareLink("email", "Email", "mailto:?" + _query(subject=title, body=link)),
        ShareLink(COPY_LINK, "Copy link", link),
    ]
