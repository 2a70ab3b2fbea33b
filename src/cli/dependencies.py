"""
Wiring for the console.

build_app() returns every use case fully constructed with its collaborators,
sharing one SessionContext, so the screens stay thin.
"""
from dataclasses import dataclass

import structlog

from src.application.interfaces.listing_repository import ListingRepository
from src.application.interfaces.market_data_source import MarketDataSource
from src.application.session_context import SessionContext
from src.application.use_cases.build_overview import BuildAnalytics, BuildDashboard, GetMarketIndex
from src.application.use_cases.manage_inventory import DeleteListing, GetOwnerListings
from src.application.use_cases.publish_listing import ListingComposer
from src.application.use_cases.upload_listing_images import UploadListingImages
from src.config import Settings
from src.infrastructure.database.connection import create_engine_for, create_session_factory
from src.infrastructure.database.repositories.listing_repository import (
    SqlAlchemyListingRepository,
)
from src.infrastructure.database.repositories.postgrest_listing_repository import (
    PostgrestListingRepository,
)
from src.infrastructure.external_services.supabase_auth_client import SupabaseAuthClient
from src.infrastructure.external_services.supabase_http import SupabaseHttp
from src.infrastructure.external_services.supabase_storage_client import SupabaseStorageClient
from src.infrastructure.market_data.static_market_data import StaticMarketDataSource
from src.infrastructure.persistence.file_session_store import FileSessionStore

logger = structlog.get_logger(__name__)


@dataclass
class App:
    session: SessionContext
    composer: ListingComposer
    get_listings: GetOwnerListings
    delete_listing: DeleteListing
    dashboard: BuildDashboard
    analytics: BuildAnalytics
    market_index: GetMarketIndex


def build_listing_repo(settings: Settings, http: SupabaseHttp, session: SessionContext) -> ListingRepository:
    if settings.database_url:
        logger.info("listing_repository_selected", backend="database")
        engine = create_engine_for(settings.database_url)
        return SqlAlchemyListingRepository(create_session_factory(engine))
    return PostgrestListingRepository(http, session)


def build_app(
    settings: Settings,
    *,
    http: SupabaseHttp | None = None,
    market_data: MarketDataSource | None = None,
) -> App:
    http = http or SupabaseHttp(
        settings.supabase_url,
        settings.supabase_anon_key,
        timeout=settings.request_timeout,
    )
    market_data = market_data or StaticMarketDataSource()

    session = SessionContext(SupabaseAuthClient(http), FileSessionStore(settings.session_file))
    listing_repo = build_listing_repo(settings, http, session)
    uploader = UploadListingImages(
        SupabaseStorageClient(http, settings.storage_bucket),
        session,
        cleanup_orphans=settings.cleanup_orphaned_uploads,
    )

    return App(
        session=session,
        composer=ListingComposer(session, uploader, listing_repo),
        get_listings=GetOwnerListings(session, listing_repo),
        delete_listing=DeleteListing(session, listing_repo),
        dashboard=BuildDashboard(session, listing_repo, market_data),
        analytics=BuildAnalytics(session, listing_repo, market_data),
        market_index=GetMarketIndex(market_data),
    )
