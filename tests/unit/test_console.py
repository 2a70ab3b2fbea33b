"""Unit tests for the console screens, driven by scripted input."""
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.application.use_cases.build_overview import AnalyticsSummary
from src.application.use_cases.manage_inventory import DeleteListingInput
from src.cli.console import Console
from src.domain.entities.auth_session import AuthUser
from src.domain.entities.listing import Listing
from src.domain.entities.listing_draft import ListingDraft
from src.domain.errors import AuthenticationRequiredError, LimitReachedError


def _scripted(*answers: str):  # type: ignore[no-untyped-def]
    remaining = list(answers)

    def _input(prompt: str) -> str:
        return remaining.pop(0)

    return _input


def _make_app(authenticated: bool = True) -> MagicMock:
    app = MagicMock()
    app.session.is_authenticated = authenticated
    app.session.user = AuthUser(id="user-1", email="grower@farm.test") if authenticated else None
    app.session.restore = AsyncMock()
    app.session.initial_route = MagicMock(return_value="dashboard" if authenticated else "login")
    app.session.sign_in = AsyncMock(return_value=AuthUser(id="user-1", email="grower@farm.test"))
    app.session.sign_out = AsyncMock()
    app.composer.draft = ListingDraft()
    app.composer.publish = AsyncMock()
    app.get_listings.execute = AsyncMock(return_value=[])
    app.delete_listing.execute = AsyncMock()
    return app


def _console(app: MagicMock, *answers: str) -> tuple[Console, list[str]]:
    lines: list[str] = []
    return Console(app, input_fn=_scripted(*answers), output=lines.append), lines


class TestConsole:
    @pytest.mark.asyncio
    async def test_signed_out_lands_on_auth_menu(self) -> None:
        app = _make_app(authenticated=False)
        console, lines = _console(app, "3")

        await console.run()

        app.session.restore.assert_awaited_once()
        assert any("Log in" in line for line in lines)

    @pytest.mark.asyncio
    async def test_login_from_auth_menu(self) -> None:
        app = _make_app(authenticated=False)
        console, lines = _console(app, "1", "grower@farm.test", "secret", "3")

        await console.run()

        app.session.sign_in.assert_awaited_once_with("grower@farm.test", "secret")
        assert any("Welcome back, grower" in line for line in lines)

    @pytest.mark.asyncio
    async def test_full_draft_blocks_picker(self) -> None:
        app = _make_app()
        app.composer.draft.images = [f"/{index}.jpg" for index in range(10)]
        console, lines = _console(app, "g", "b")

        await console.composer_screen()

        assert any(LimitReachedError(10).message in line for line in lines)
        app.composer.add_photo.assert_not_called()

    @pytest.mark.asyncio
    async def test_publish_requires_login_offers_navigation(self) -> None:
        app = _make_app()
        app.composer.publish = AsyncMock(side_effect=AuthenticationRequiredError())
        console, lines = _console(app, "s", "y", "grower@farm.test", "secret", "b")

        await console.composer_screen()

        assert any("Please log in to publish listings" in line for line in lines)
        app.session.sign_in.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_price_input_keeps_digits(self) -> None:
        app = _make_app()
        console, _ = _console(app, "p", "1,2a3", "b")

        await console.composer_screen()

        assert app.composer.draft.price == "123"

    @pytest.mark.asyncio
    async def test_inventory_delete_confirmed(self) -> None:
        app = _make_app()
        app.get_listings.execute = AsyncMock(
            return_value=[Listing(id="l-1", user_id="user-1", nomenclature="Seed", price=Decimal("5"))]
        )
        console, lines = _console(app, "1", "y")

        await console.inventory_screen()

        app.delete_listing.execute.assert_awaited_once_with(DeleteListingInput(listing_id="l-1"))
        assert any("Listing deleted." in line for line in lines)

    @pytest.mark.asyncio
    async def test_analytics_average_rounded(self) -> None:
        app = _make_app()
        app.analytics.execute = AsyncMock(
            return_value=AnalyticsSummary(
                total_listings=3,
                total_value=Decimal("1000"),
                average_price=Decimal("1000") / 3,
                total_views=126,
            )
        )
        console, lines = _console(app)

        await console.analytics_screen()

        assert any(line.endswith("333") for line in lines)
