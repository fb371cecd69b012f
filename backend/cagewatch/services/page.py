"""Public channel page live check."""

from cagewatch.services import LiveChecker

LIVE_MARKER = '"isLive":true'

HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept-Language": "en-US,en;q=0.9",
}


class PageLiveChecker(LiveChecker):
    """Scrapes the public channel page for the live marker."""

    name = "page"

    async def is_live(self) -> bool:
        async with self.client(headers=HEADERS, follow_redirects=True) as client:
            resp = await client.get(self.settings.channel_page_url)
            resp.raise_for_status()
        return LIVE_MARKER in resp.text
