import asyncio
from dataclasses import dataclass, replace

import structlog

from src.application.interfaces.listing_repository import ListingRepository
from src.application.session_context import SessionContext
from src.application.use_cases.upload_listing_images import (
    UploadListingImages,
    UploadListingImagesInput,
    UploadedImages,
)
from src.domain.entities.listing import Listing
from src.domain.entities.listing_draft import ListingDraft
from src.domain.enums.image_source import ImageSource
from src.domain.enums.publish_state import PublishState
from src.domain.errors import AuthenticationRequiredError, PublishInProgressError
from src.domain.state_machine.publish_state_machine import PublishStateMachine

logger = structlog.get_logger(__name__)

_state_machine = PublishStateMachine()


@dataclass
class PublishOutcome:
    listing: Listing
    title: str = "Success"
    message: str = "Listing published successfully!"


class ListingComposer:
    """
    Use case: compose a listing in a draft and publish it.

    Drives EDITING → VALIDATING → UPLOADING → PERSISTING → PUBLISHED. Any
    failure lands back in EDITING with the draft untouched, any photos it
    uploaded removed, and the error re-raised for the caller to show.

    The listing is built from the draft as it was when validated. A successful
    publish clears the draft unless it was edited while the publish ran.
    """

    def __init__(
        self,
        session: SessionContext,
        uploader: UploadListingImages,
        listing_repo: ListingRepository,
        draft: ListingDraft | None = None,
    ) -> None:
        self._session = session
        self._uploader = uploader
        self._listing_repo = listing_repo
        self.draft = draft if draft is not None else ListingDraft()
        self._state = PublishState.EDITING
        self._in_flight: asyncio.Future[PublishOutcome] | None = None

    @property
    def state(self) -> PublishState:
        return self._state

    @property
    def is_publishing(self) -> bool:
        return self._in_flight is not None and not self._in_flight.done()

    def add_photo(self, locator: str, source: ImageSource) -> None:
        """Add a camera capture or gallery pick. Raises LimitReachedError when full."""
        self.draft.add_image(locator)
        logger.debug("draft_photo_added", source=source.value, count=self.draft.image_count)

    def _transition(self, to_state: PublishState) -> None:
        _state_machine.validate_transition(self._state, to_state)
        logger.debug("publish_state_changed", from_state=self._state.value, to_state=to_state.value)
        self._state = to_state

    async def publish(self) -> PublishOutcome:
        """
        Validate, upload and persist the draft.

        The work runs as its own task shielded from the caller: cancelling the
        awaiting caller detaches it, and the publish still runs to completion.
        """
        if self.is_publishing:
            raise PublishInProgressError()

        task = asyncio.ensure_future(self._run_publish())
        task.add_done_callback(self._on_publish_done)
        self._in_flight = task
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            logger.info("listing_publish_detached")
            raise

    @staticmethod
    def _on_publish_done(task: "asyncio.Future[PublishOutcome]") -> None:
        # A detached publish has no awaiting caller to receive its outcome
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.debug("listing_publish_task_finished", error_type=type(exc).__name__)

    async def _run_publish(self) -> PublishOutcome:
        self._transition(PublishState.VALIDATING)
        uploaded: UploadedImages | None = None
        try:
            user = self._session.user
            if user is None:
                raise AuthenticationRequiredError()
            self.draft.validate()
            # Edits made while the publish is in flight do not leak into it
            snapshot = replace(self.draft, images=list(self.draft.images))

            self._transition(PublishState.UPLOADING)
            uploaded = await self._uploader.execute(
                UploadListingImagesInput(locators=snapshot.images, owner_id=user.id)
            )

            self._transition(PublishState.PERSISTING)
            listing = await self._listing_repo.create(
                user.id, snapshot.to_new_listing(uploaded.urls)
            )
        except Exception as exc:
            logger.warning(
                "listing_publish_failed",
                failed_in=self._state.value,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            if uploaded is not None:
                await self._uploader.discard(uploaded.keys)
            self._transition(PublishState.EDITING)
            raise

        self._transition(PublishState.PUBLISHED)
        if self.draft == snapshot:
            self.draft.clear()
        else:
            logger.info("draft_edited_during_publish", listing_id=listing.id)
        logger.info("listing_published", listing_id=listing.id, owner_id=user.id)

        # The next editing session starts straight away
        self._transition(PublishState.EDITING)
        return PublishOutcome(listing=listing)
