"""Listing persistence through the backend's REST interface to the listings table."""
import httpx
import structlog
from pydantic import ValidationError as PydanticValidationError

from src.application.interfaces.listing_repository import ListingRepository
from src.application.session_context import SessionContext
from src.domain.entities.listing import Listing, NewListing
from src.domain.errors import NetworkError, PersistenceError, UnauthenticatedError
from src.domain.values.optional_field import to_nullable
from src.infrastructure.external_services.supabase_http import SupabaseHttp, error_message
from src.infrastructure.external_services.supabase_schemas import ListingRow

logger = structlog.get_logger(__name__)

TABLE_PATH = "/rest/v1/listings"


def _to_row(owner_id: str, new_listing: NewListing) -> dict:  # type: ignore[type-arg]
    return {
        "user_id": owner_id,
        "nomenclature": new_listing.nomenclature,
        "classification": to_nullable(new_listing.classification),
        "price": float(new_listing.price),
        "narrative": to_nullable(new_listing.narrative),
        "image_urls": list(new_listing.image_urls),
        "provenance_certified": new_listing.provenance_certified,
        "logistics_provided": new_listing.logistics_provided,
    }


def _parse_rows(response: httpx.Response, operation: str) -> list[Listing]:
    try:
        return [ListingRow.model_validate(row).to_domain() for row in response.json()]
    except (ValueError, TypeError, PydanticValidationError) as exc:
        raise PersistenceError(operation, "unexpected response from the database") from exc


class PostgrestListingRepository(ListingRepository):
    """
    Listing repository over the REST API.

    Requests carry the signed-in user's token so the table's row-level
    security policies apply; the owner filter is sent as well.
    """

    def __init__(self, http: SupabaseHttp, session: SessionContext) -> None:
        self._http = http
        self._session = session

    async def _request(
        self,
        method: str,
        operation: str,
        *,
        params: dict | None = None,  # type: ignore[type-arg]
        json: dict | None = None,  # type: ignore[type-arg]
        prefer: str | None = None,
    ) -> httpx.Response:
        access_token = await self._session.access_token()
        headers = self._http.headers(access_token)
        if prefer:
            headers["Prefer"] = prefer

        async with self._http.client() as client:
            try:
                response = await client.request(
                    method, TABLE_PATH, params=params, json=json, headers=headers
                )
            except httpx.RequestError as exc:
                logger.error("listings_connection_failed", operation=operation, error=str(exc))
                raise NetworkError(
                    "Network error: Please check your internet connection."
                ) from exc

        if response.is_error:
            message = error_message(response)
            logger.error(
                "listings_request_rejected",
                operation=operation,
                status_code=response.status_code,
                response=message,
            )
            if response.status_code == 401:
                raise UnauthenticatedError()
            raise PersistenceError(operation, message)
        return response

    async def create(self, owner_id: str, new_listing: NewListing) -> Listing:
        response = await self._request(
            "POST",
            "create listing",
            json=_to_row(owner_id, new_listing),
            prefer="return=representation",
        )
        rows = _parse_rows(response, "create listing")
        if not rows:
            raise PersistenceError("create listing", "the database returned no record")
        logger.info("listing_created", listing_id=rows[0].id, owner_id=owner_id)
        return rows[0]

    async def list_by_owner(self, owner_id: str) -> list[Listing]:
        response = await self._request(
            "GET",
            "fetch listings",
            params={
                "select": "*",
                "user_id": f"eq.{owner_id}",
                "order": "created_at.desc",
            },
        )
        return _parse_rows(response, "fetch listings")

    async def delete_by_id(self, listing_id: str, owner_id: str) -> None:
        await self._request(
            "DELETE",
            "delete listing",
            params={"id": f"eq.{listing_id}", "user_id": f"eq.{owner_id}"},
        )
