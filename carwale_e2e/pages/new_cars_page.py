"""Page object for the CarWale New Cars page."""

from typing import Optional

from playwright.sync_api import Page

from .base_page import BasePage, url_pattern

NEW_CARS_PATH = "/new/"
NEW_CARS_URL = url_pattern(r".*new.*|.*cars.*")
SORT_OPTIONS = ("popularity", "price-low", "price-high", "latest")


class NewCarsPage(BasePage):
    """New Cars listing: filters, car cards and sorting."""

    def __init__(self, page: Page, base_url: Optional[str] = None):
        super().__init__(page, base_url)

        # Header
        self.page_title = page.locator("h1").first
        self.page_heading = page.locator('h1, .page-heading, [class*="heading"]').first
        self.breadcrumb = page.locator('.breadcrumb, [class*="breadcrumb"], nav[aria-label="breadcrumb"]')

        # Filters
        self.budget_filter = page.locator('[data-filter="budget"], .budget-filter, [class*="budget"]').first
        self.brand_filter = page.locator('[data-filter="brand"], .brand-filter, [class*="brand-filter"]').first
        self.body_type_filter = page.locator('[data-filter="bodytype"], .bodytype-filter, [class*="body-type"]').first
        self.fuel_type_filter = page.locator('[data-filter="fueltype"], .fuel-filter, [class*="fuel"]').first
        self.transmission_filter = page.locator('[data-filter="transmission"], [class*="transmission"]').first
        self.seating_filter = page.locator('[data-filter="seating"], [class*="seating"]').first

        # Listings
        self.car_cards = page.locator(
            'li[class*="card"], article, [class*="carCard"], [class*="card-container"], .o-be864x'
        )
        self.car_names = page.locator('h3, h2, [class*="carName"], a[title*="Price"], .o-cpnuEd')
        self.car_prices = page.locator('[class*="price"], .price, .o-euonUq')
        self.view_more_button = page.locator(
            'button:has-text("View More"), a:has-text("View More"), .o-cpnuEd:has-text("More")'
        )

        # Popular brands
        self.popular_brands = page.locator('.popular-brands, [class*="brand-list"], .brand-section')
        self.brand_logos = page.locator('.brand-logo, [class*="brand"] img, .popular-brands img')

        self.sort_dropdown = page.locator('select[name="sort"], .sort-dropdown, [class*="sort"]').first

    def goto(self) -> None:
        """Open the New Cars page directly."""
        self.navigate(NEW_CARS_PATH)
        self.accept_cookies_if_present()

    def is_loaded(self) -> bool:
        return self.is_visible(self.page_heading)

    # Filters

    def open_budget_filter(self) -> None:
        self.click(self.budget_filter)
        self.wait_for_page_load()

    def select_brand(self, brand_name: str) -> None:
        self.click(self.page.get_by_text(brand_name).first)
        self.wait_for_page_load()

    def select_body_type(self, body_type: str) -> None:
        self.click(self.body_type_filter)
        self.click(self.page.get_by_text(body_type).first)
        self.wait_for_page_load()

    # Listings

    def get_car_listings_count(self) -> int:
        return self.get_count(self.car_cards)

    def click_on_car(self, car_name: str) -> None:
        self.click(self.page.get_by_text(car_name).first)
        self.wait_for_page_load()

    def click_first_car(self) -> None:
        self.click(self.car_cards.first)
        self.wait_for_page_load()

    def load_more_cars(self) -> bool:
        """Click View More if it is shown.

        Returns:
            True if more cars were requested.
        """
        if not self.is_visible(self.view_more_button):
            return False
        self.click(self.view_more_button)
        self.wait_for_page_load()
        return True

    def sort_by(self, option: str) -> None:
        if option not in SORT_OPTIONS:
            raise ValueError(f"Unknown sort option '{option}'. Must be one of: {', '.join(SORT_OPTIONS)}")
        self.select_option(self.sort_dropdown, option)
        self.wait_for_page_load()

    # Assertions

    def expect_new_cars_page_displayed(self) -> None:
        self.expect_url(NEW_CARS_URL)

    def expect_page_heading(self, expected_text: str) -> None:
        self.expect_contains_text(self.page_heading, expected_text)

    def expect_car_listings_displayed(self) -> None:
        if self.get_count(self.car_cards) == 0:
            raise AssertionError("No car listings found on the page")

    def expect_filters_visible(self) -> None:
        """At least one of the budget, brand or body type filters is shown."""
        filters = (self.budget_filter, self.brand_filter, self.body_type_filter)
        if not any(self.is_visible(f) for f in filters):
            raise AssertionError("No filters visible on New Cars page")
