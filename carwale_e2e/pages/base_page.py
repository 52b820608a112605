"""Base page object shared by all CarWale pages.

Wraps Playwright's sync API with the navigation, wait, action and
assertion helpers the page objects build on.
"""

import logging
import os
import re
from pathlib import Path
from typing import Optional, Pattern, Union

from playwright.sync_api import Locator, Page, TimeoutError as PlaywrightTimeoutError, expect

from ..settings.schema import DEFAULT_BASE_URL

logger = logging.getLogger(__name__)

SCREENSHOT_DIR = Path("screenshots")
COOKIE_BUTTON_SELECTOR = 'button:has-text("Accept"), button:has-text("Got it"), .cookie-accept'


class BasePage:
    """Common behaviour for page objects."""

    def __init__(self, page: Page, base_url: Optional[str] = None):
        self.page = page
        self.base_url = base_url or os.environ.get("BASE_URL") or DEFAULT_BASE_URL

    # Navigation

    def navigate(self, path: str = "/") -> None:
        """Open a path relative to the context's base URL."""
        self.page.goto(path)
        self.wait_for_page_load()

    def navigate_to_url(self, url: str) -> None:
        self.page.goto(url)
        self.wait_for_page_load()

    def go_back(self) -> None:
        self.page.go_back()
        self.wait_for_page_load()

    def refresh(self) -> None:
        self.page.reload()
        self.wait_for_page_load()

    # Waits

    def wait_for_page_load(self) -> None:
        """Wait for DOM content and network idle."""
        self.page.wait_for_load_state("domcontentloaded")
        self.page.wait_for_load_state("networkidle")

    def wait_for_element(self, locator: Locator, timeout: float = 10000) -> None:
        locator.wait_for(state="visible", timeout=timeout)

    def wait_for_element_hidden(self, locator: Locator, timeout: float = 10000) -> None:
        locator.wait_for(state="hidden", timeout=timeout)

    def wait_for_url_contains(self, text: str, timeout: float = 30000) -> None:
        self.page.wait_for_url(f"**/*{text}*", timeout=timeout)

    # Actions

    def click(self, locator: Locator) -> None:
        locator.click()

    def double_click(self, locator: Locator) -> None:
        locator.dblclick()

    def right_click(self, locator: Locator) -> None:
        locator.click(button="right")

    def fill(self, locator: Locator, text: str) -> None:
        """Clear an input and fill it."""
        locator.clear()
        locator.fill(text)

    def type(self, locator: Locator, text: str, delay: float = 50) -> None:
        """Type text one key at a time."""
        locator.press_sequentially(text, delay=delay)

    def hover(self, locator: Locator) -> None:
        locator.hover()

    def select_option(self, locator: Locator, value: str) -> None:
        locator.select_option(value)

    def check(self, locator: Locator) -> None:
        locator.check()

    def uncheck(self, locator: Locator) -> None:
        locator.uncheck()

    # Getters

    def get_text(self, locator: Locator) -> str:
        return locator.text_content() or ""

    def get_value(self, locator: Locator) -> str:
        return locator.input_value()

    def get_attribute(self, locator: Locator, attribute: str) -> Optional[str]:
        return locator.get_attribute(attribute)

    def get_current_url(self) -> str:
        return self.page.url

    def get_title(self) -> str:
        return self.page.title()

    def get_count(self, locator: Locator) -> int:
        return locator.count()

    # State checks

    def is_visible(self, locator: Locator) -> bool:
        return locator.is_visible()

    def is_enabled(self, locator: Locator) -> bool:
        return locator.is_enabled()

    def is_checked(self, locator: Locator) -> bool:
        return locator.is_checked()

    # Assertions

    def expect_visible(self, locator: Locator) -> None:
        expect(locator).to_be_visible()

    def expect_hidden(self, locator: Locator) -> None:
        expect(locator).to_be_hidden()

    def expect_text(self, locator: Locator, text: str) -> None:
        expect(locator).to_have_text(text)

    def expect_contains_text(self, locator: Locator, text: str) -> None:
        expect(locator).to_contain_text(text)

    def expect_url(self, url_pattern: Union[str, Pattern[str]]) -> None:
        expect(self.page).to_have_url(url_pattern)

    def expect_title(self, title: Union[str, Pattern[str]]) -> None:
        expect(self.page).to_have_title(title)

    # Screenshots

    def take_screenshot(self, name: str) -> bytes:
        """Save a full-page screenshot to ``screenshots/<name>.png``."""
        SCREENSHOT_DIR.mkdir(parents=True, exist_ok=True)
        return self.page.screenshot(path=str(SCREENSHOT_DIR / f"{name}.png"), full_page=True)

    # Keyboard

    def press_key(self, key: str) -> None:
        self.page.keyboard.press(key)

    # Scroll

    def scroll_to_element(self, locator: Locator) -> None:
        locator.scroll_into_view_if_needed()

    def scroll_to_top(self) -> None:
        self.page.evaluate("() => window.scrollTo(0, 0)")

    def scroll_to_bottom(self) -> None:
        self.page.evaluate("() => window.scrollTo(0, document.body.scrollHeight)")

    # Cookies

    def clear_cookies(self) -> None:
        self.page.context.clear_cookies()

    def accept_cookies_if_present(self, timeout: float = 3000) -> bool:
        """Dismiss the cookie consent banner if it shows up.

        Returns:
            True if a banner was dismissed.
        """
        accept_button = self.page.locator(COOKIE_BUTTON_SELECTOR).first
        try:
            accept_button.wait_for(state="visible", timeout=timeout)
        except PlaywrightTimeoutError:
            logger.debug("No cookie banner on %s", self.page.url)
            return False
        accept_button.click()
        return True


def url_pattern(pattern: str) -> Pattern[str]:
    """Compile a case-insensitive URL pattern."""
    return re.compile(pattern, re.IGNORECASE)
