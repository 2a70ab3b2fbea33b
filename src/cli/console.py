"""Farmstand Marketplace console - interactive screens over the use cases."""
import asyncio
from collections.abc import Callable

import structlog

from src.application.use_cases.manage_inventory import DeleteListingInput
from src.cli.dependencies import App
from src.domain.entities.listing import MAX_IMAGES, MAX_NARRATIVE_LENGTH
from src.domain.enums.image_source import ImageSource
from src.domain.errors import AuthenticationRequiredError, LimitReachedError, MarketplaceError

logger = structlog.get_logger(__name__)

# Colors for output
RED = "\033[0;31m"
GREEN = "\033[0;32m"
BLUE = "\033[0;34m"
YELLOW = "\033[1;33m"
NC = "\033[0m"  # No Color


class Console:
    def __init__(
        self,
        app: App,
        *,
        input_fn: Callable[[str], str] = input,
        output: Callable[[str], None] = print,
    ) -> None:
        self._app = app
        self._input_fn = input_fn
        self._out = output
        self._running = True

    async def ask(self, prompt: str) -> str:
        # Blocking read off the event loop so in-flight requests keep running
        return (await asyncio.to_thread(self._input_fn, f"{YELLOW}{prompt}{NC}")).strip()

    async def confirm(self, prompt: str) -> bool:
        return (await self.ask(f"{prompt} [y/N]: ")).lower() in ("y", "yes")

    def alert(self, title: str, message: str) -> None:
        colour = GREEN if title == "Success" else RED
        self._out(f"\n{colour}[{title}]{NC} {message}\n")

    async def show_error(self, exc: MarketplaceError) -> None:
        self.alert(exc.title, exc.message)
        if isinstance(exc, AuthenticationRequiredError) and await self.confirm("Log in now?"):
            await self.login_screen()

    # -------------------------------------------------------------------------
    # Entry
    # -------------------------------------------------------------------------

    async def run(self) -> None:
        self._out(f"{BLUE}Restoring session...{NC}")
        await self._app.session.restore()
        logger.info("console_started", route=self._app.session.initial_route())

        while self._running:
            try:
                if self._app.session.is_authenticated:
                    await self.main_menu()
                else:
                    await self.auth_menu()
            except MarketplaceError as exc:
                await self.show_error(exc)

    async def auth_menu(self) -> None:
        self._out(f"\n{BLUE}=== FARMSTAND MARKETPLACE ==={NC}")
        self._out(f"{GREEN}1){NC} Log in")
        self._out(f"{GREEN}2){NC} Create account")
        self._out(f"{GREEN}3){NC} Exit")
        choice = await self.ask("Select an option [1-3]: ")
        if choice == "1":
            await self.login_screen()
        elif choice == "2":
            await self.signup_screen()
        elif choice == "3":
            self._running = False
        else:
            self._out(f"{RED}Invalid option{NC}")

    async def main_menu(self) -> None:
        actions = {
            "1": ("Dashboard", self.dashboard_screen),
            "2": ("New listing", self.composer_screen),
            "3": ("Inventory", self.inventory_screen),
            "4": ("Analytics", self.analytics_screen),
            "5": ("Market index", self.market_index_screen),
            "6": ("Profile", self.profile_screen),
        }
        self._out(f"\n{BLUE}=== MAIN MENU ==={NC}")
        for key, (label, _) in actions.items():
            self._out(f"{GREEN}{key}){NC} {label}")
        self._out(f"{GREEN}7){NC} Exit")

        choice = await self.ask("Select an option [1-7]: ")
        if choice == "7":
            self._running = False
        elif choice in actions:
            await actions[choice][1]()
        else:
            self._out(f"{RED}Invalid option{NC}")

    # -------------------------------------------------------------------------
    # Auth screens
    # -------------------------------------------------------------------------

    async def login_screen(self) -> None:
        email = await self.ask("Email: ")
        password = await self.ask("Password: ")
        try:
            user = await self._app.session.sign_in(email, password)
        except MarketplaceError as exc:
            self.alert(exc.title, exc.message)
            return
        self._out(f"{GREEN}Welcome back, {user.display_name}{NC}")

    async def signup_screen(self) -> None:
        full_name = await self.ask("Full name: ")
        farm_name = await self.ask("Farm name: ")
        email = await self.ask("Email: ")
        password = await self.ask("Password: ")
        agreed = await self.confirm("I agree to the terms of cultivation")

        try:
            result = await self._app.session.sign_up(
                email=email,
                password=password,
                full_name=full_name,
                farm_name=farm_name,
                agreed_to_terms=agreed,
            )
        except MarketplaceError as exc:
            self.alert(exc.title, exc.message)
            return

        if result.confirmation_required:
            self.alert(
                "Confirmation Required",
                "Please check your email to confirm your account before logging in.",
            )
        else:
            self.alert("Success", "Account created! You can now log in.")

    async def profile_screen(self) -> None:
        user = self._app.session.user
        if user is None:
            return
        self._out(f"\n{BLUE}=== PROFILE ==={NC}")
        self._out(f"Name:  {user.display_name or 'User'}")
        self._out(f"Email: {user.email}")
        if user.metadata.get("farm_name"):
            self._out(f"Farm:  {user.metadata['farm_name']}")
        if await self.confirm("Sign out?"):
            await self._app.session.sign_out()
            self._out(f"{GREEN}Signed out{NC}")

    # -------------------------------------------------------------------------
    # Listing composer
    # -------------------------------------------------------------------------

    def _render_draft(self) -> None:
        draft = self._app.composer.draft
        self._out(f"\n{BLUE}=== NEW LISTING ==={NC}")
        self._out(f"Photos ({draft.image_count}/{MAX_IMAGES}):")
        for index, locator in enumerate(draft.images, start=1):
            self._out(f"  {index}. {locator}")
        self._out(f"Nomenclature:   {draft.nomenclature}")
        self._out(f"Classification: {draft.classification}")
        self._out(f"Price:          {draft.price}")
        self._out(f"Narrative:      {draft.narrative} ({len(draft.narrative)}/{MAX_NARRATIVE_LENGTH})")
        self._out(f"Provenance certified: {'yes' if draft.provenance_certified else 'no'}")
        self._out(f"Logistics provided:   {'yes' if draft.logistics_provided else 'no'}")

    async def composer_screen(self) -> None:
        composer = self._app.composer
        draft = composer.draft
        while True:
            self._render_draft()
            self._out(
                f"{GREEN}g){NC} Add from gallery  {GREEN}c){NC} Take photo  {GREEN}r){NC} Remove photo\n"
                f"{GREEN}n){NC} Nomenclature  {GREEN}k){NC} Classification  {GREEN}p){NC} Price  "
                f"{GREEN}d){NC} Narrative\n"
                f"{GREEN}v){NC} Toggle provenance  {GREEN}l){NC} Toggle logistics\n"
                f"{GREEN}s){NC} Publish  {GREEN}b){NC} Back"
            )
            choice = (await self.ask("> ")).lower()
            try:
                if choice in ("g", "c"):
                    source = ImageSource.GALLERY if choice == "g" else ImageSource.CAMERA
                    if not draft.can_add_image:
                        # The picker never opens on a full draft
                        raise LimitReachedError(MAX_IMAGES)
                    locator = await self.ask("Image path: ")
                    if locator:
                        composer.add_photo(locator, source)
                elif choice == "r":
                    index = await self.ask("Photo number: ")
                    if index.isdigit() and 1 <= int(index) <= draft.image_count:
                        draft.remove_image(int(index) - 1)
                elif choice == "n":
                    draft.nomenclature = await self.ask("Nomenclature: ")
                elif choice == "k":
                    draft.classification = await self.ask("Classification: ")
                elif choice == "p":
                    draft.set_price(await self.ask("Price: "))
                elif choice == "d":
                    draft.narrative = await self.ask("Narrative: ")
                elif choice == "v":
                    draft.provenance_certified = not draft.provenance_certified
                elif choice == "l":
                    draft.logistics_provided = not draft.logistics_provided
                elif choice == "s":
                    self._out(f"{BLUE}Publishing...{NC}")
                    outcome = await composer.publish()
                    self.alert(outcome.title, outcome.message)
                elif choice == "b":
                    return
            except MarketplaceError as exc:
                await self.show_error(exc)

    # -------------------------------------------------------------------------
    # Listings and overview
    # -------------------------------------------------------------------------

    async def inventory_screen(self) -> None:
        listings = await self._app.get_listings.execute()
        self._out(f"\n{BLUE}=== INVENTORY ({len(listings)}) ==={NC}")
        if not listings:
            self._out("No listings yet.")
            return
        for index, listing in enumerate(listings, start=1):
            classification = f" [{listing.classification}]" if listing.classification else ""
            self._out(
                f"{index}. {listing.nomenclature}{classification} - {listing.price} "
                f"({len(listing.image_urls)} photos)"
            )

        choice = await self.ask("Delete listing number (blank to go back): ")
        if choice.isdigit() and 1 <= int(choice) <= len(listings):
            listing = listings[int(choice) - 1]
            if await self.confirm(f"Delete '{listing.nomenclature}'?"):
                await self._app.delete_listing.execute(DeleteListingInput(listing_id=listing.id))
                self.alert("Success", "Listing deleted.")

    async def dashboard_screen(self) -> None:
        dashboard = await self._app.dashboard.execute()
        self._out(f"\n{BLUE}SYSTEM ACTIVE{NC}")
        self._out(f"HAI, {dashboard.greeting_name}")
        self._out(f"Active listings: {dashboard.active_listings}")
        for price in dashboard.market_prices:
            sign = "+" if price.is_positive else ""
            self._out(f"  {price.name:<10} ${price.price}  {sign}{price.change_percent}%")
        for item in dashboard.spotlight:
            self._out(f"{item.subtitle}: {item.title}")

    async def analytics_screen(self) -> None:
        summary = await self._app.analytics.execute()
        self._out(f"\n{BLUE}=== ANALYTICS ==={NC}")
        self._out(f"Total listings: {summary.total_listings}")
        self._out(f"Total value:    {summary.total_value}")
        self._out(f"Average price:  {summary.average_price:.0f}")
        self._out(f"Views:          {summary.total_views}")

    async def market_index_screen(self) -> None:
        index = await self._app.market_index.execute()
        self._out(f"\n{BLUE}=== MARKET INDEX ==={NC}")
        self._out(f"Market growth: +{index.growth_percent}%")
        for item in index.trending:
            sign = "+" if item.change_percent >= 0 else ""
            self._out(
                f"  {item.name:<18} {item.category:<13} ₹{item.price:,}  "
                f"{sign}{item.change_percent}%  vol {item.volume}"
            )
