"""
Paginated walk over the device/sensor listing.

Pages are requested in order from 1. The walk continues only while the
previous page was full and the row count says more rows exist; a short
page always ends the walk for the current cycle.
"""

from typing import Any, Awaitable, Callable

from ..api import CredentialManager, TlinkApiClient
from ..api.client import APP_ID_HEADER, DEVICE_SENSOR_DATAS_PATH
from ..exceptions import AuthError, PayloadError, TransportError, ValidationError
from ..logging import log_debug, log_error, log_info, log_warn
from ..types import ListingPage


RecordHandler = Callable[[Any], Awaitable[None]]


def has_next_page(page: int, page_size: int, returned: int, row_count: int) -> bool:
    """Next page is fetched iff this one was full and rows remain by count."""
    return returned == page_size and page * page_size < row_count


class PaginationDriver:
    """Fetches listing pages and hands every device record to a handler."""

    def __init__(
        self,
        client: TlinkApiClient,
        credentials: CredentialManager,
        client_id: str,
        handle_record: RecordHandler
    ):
        """
        Initialize pagination driver.

        Args:
            client: API client for the listing endpoint
            credentials: Source of the bearer token and user id
            client_id: Application id sent in the tlinkAppId header
            handle_record: Coroutine called with each raw device record
        """
        self.client = client
        self.credentials = credentials
        self.client_id = client_id
        self.handle_record = handle_record

    async def fetch_page(self, page: int, page_size: int) -> ListingPage:
        """
        Request and validate one listing page.

        Raises:
            AuthError: If no usable token can be obtained
            TransportError: If the request produced no body
            PayloadError: If the body is not a JSON object
            ValidationError: If the envelope is malformed or rejected
        """
        credential = await self.credentials.ensure_valid()
        payload = {
            "userId": credential.user_id,
            "currPage": page,
            "pageSize": page_size,
        }
        data = await self.client.post_json(
            DEVICE_SENSOR_DATAS_PATH,
            payload,
            headers={APP_ID_HEADER: self.client_id},
            bearer_token=credential.token,
        )
        try:
            return ListingPage.from_dict(data)
        except ValidationError:
            log_debug(str(data))
            raise

    async def sync_all(self, page_size: int) -> int:
        """
        Walk the listing from page 1.

        Any failure on a page aborts that page and the rest of the walk.

        Returns:
            Number of pages whose records were processed
        """
        page = 1
        processed = 0

        while True:
            try:
                listing = await self.fetch_page(page, page_size)
            except AuthError:
                # Already logged by the credential manager
                break
            except (TransportError, PayloadError) as e:
                log_error(f"Failed to fetch device listing page {page}")
                log_debug(str(e))
                break
            except ValidationError as e:
                log_warn(f"Invalid device listing page {page}: {e}")
                break

            for record in listing.records:
                await self.handle_record(record)
            processed += 1

            if not has_next_page(page, page_size, len(listing.records), listing.row_count):
                break
            page += 1

        log_info(f"Listing walk finished after {processed} page(s)")
        return processed
