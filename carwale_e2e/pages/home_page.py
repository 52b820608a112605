"""Page object for the CarWale home page."""

from typing import Optional

from playwright.sync_api import Page

from .base_page import BasePage, url_pattern

NEW_CARS_URL = url_pattern(r".*new.*cars.*|.*/new/.*")


class HomePage(BasePage):
    """Home page locators and navigation-menu actions.

    CarWale uses generated class names, so locators combine text and
    href based selectors and take the first match.
    """

    def __init__(self, page: Page, base_url: Optional[str] = None):
        super().__init__(page, base_url)

        # Navigation menu
        self.new_cars_menu = page.locator(
            'header a:has-text("New Cars"), nav a:has-text("New Cars"), '
            '[class*="nav"] a:has-text("New Cars"), a[href*="/new-cars"], a[href="/new/"]'
        ).first
        self.used_cars_menu = page.locator(
            'header a:has-text("Used"), nav a:has-text("Used"), '
            '[class*="nav"] a:has-text("Used Cars"), a[href*="/used-cars"], a[href*="used"]'
        ).first
        self.sell_car_menu = page.locator(
            'header a:has-text("Sell"), nav a:has-text("Sell"), '
            '[class*="nav"] a:has-text("Sell"), a[href*="/sell"], a[href*="sell-car"]'
        ).first
        self.comparison_menu = page.locator(
            'header a:has-text("Compare"), nav a:has-text("Compare"), a[href*="compare"]'
        ).first
        self.news_menu = page.locator(
            'header a:has-text("News"), nav a:has-text("News"), a[href*="/news"]'
        ).first

        # New Cars dropdown
        self.new_cars_dropdown = page.locator(
            '.o-cpnuEd, .dropdown-menu, [class*="dropdown"], [class*="submenu"]'
        ).first
        self.find_new_cars_link = page.locator(
            'a:has-text("Find New Cars"), a[href*="/new/"], a[href*="new-cars"]'
        ).first
        self.new_cars_by_brand_link = page.locator('a:has-text("Cars by Brand"), a:has-text("By Brand")').first
        self.new_cars_by_budget_link = page.locator('a:has-text("Cars by Budget"), a:has-text("By Budget")').first
        self.upcoming_cars_link = page.locator('a:has-text("Upcoming Cars"), a[href*="upcoming"]').first
        self.electric_cars_link = page.locator('a:has-text("Electric Cars"), a[href*="electric"]').first
        self.latest_cars_link = page.locator('a:has-text("Latest Cars"), a:has-text("Newly Launched")').first

        # Search
        self.search_box = page.locator(
            'input[type="search"], input[placeholder*="Search"], .search-input, #search'
        ).first
        self.search_button = page.locator(
            'button[type="submit"], .search-button, [aria-label="Search"]'
        ).first

        self.carwale_logo = page.locator('a[href="/"] img, .logo, [class*="logo"]').first
        self.page_title = page.locator("h1").first
        self.hero_section = page.locator('.hero, [class*="hero"], .banner').first

    def goto(self) -> None:
        """Open the home page and dismiss the cookie banner."""
        self.navigate("/")
        self.accept_cookies_if_present()

    def is_loaded(self) -> bool:
        return self.is_visible(self.carwale_logo)

    # Navigation menu

    def hover_on_new_cars_menu(self) -> None:
        """Hover NEW CARS to open its dropdown."""
        self.wait_for_element(self.new_cars_menu)
        self.hover(self.new_cars_menu)
        # dropdown animation
        self.page.wait_for_timeout(500)

    def click_find_new_cars(self) -> None:
        self.wait_for_element(self.find_new_cars_link, 5000)
        self.click(self.find_new_cars_link)

    def navigate_to_new_cars_via_hover(self) -> None:
        """Hover NEW CARS, click Find New Cars, wait for the new page."""
        self.hover_on_new_cars_menu()
        self.click_find_new_cars()
        self.wait_for_page_load()

    def click_new_cars_menu(self) -> None:
        self.wait_for_element(self.new_cars_menu)
        self.click(self.new_cars_menu)

    def navigate_to_upcoming_cars(self) -> None:
        self.hover_on_new_cars_menu()
        self.wait_for_element(self.upcoming_cars_link)
        self.click(self.upcoming_cars_link)
        self.wait_for_page_load()

    def navigate_to_electric_cars(self) -> None:
        self.hover_on_new_cars_menu()
        self.wait_for_element(self.electric_cars_link)
        self.click(self.electric_cars_link)
        self.wait_for_page_load()

    # Search

    def search_car(self, search_term: str) -> None:
        self.fill(self.search_box, search_term)
        self.click(self.search_button)
        self.wait_for_page_load()

    # Assertions

    def expect_home_page_displayed(self) -> None:
        self.expect_visible(self.carwale_logo)
        self.expect_visible(self.new_cars_menu)

    def expect_new_cars_dropdown_visible(self) -> None:
        self.expect_visible(self.find_new_cars_link)

    def expect_on_new_cars_page(self) -> None:
        self.expect_url(NEW_CARS_URL)
