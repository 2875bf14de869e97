from typing import Protocol, Optional

from shared.entities.content import ContentPage

class SearchPort(Protocol):
    """
    Outbound port for ranked search.
    Returns one page of matching contents (each carrying its rank) and the
    token of the next page, "" at the end.
    """
    async def search(
        self,
        query: str,
        page_size: Optional[int] = None,
        page_token: Optional[str] = None,
    ) -> ContentPage: ...
