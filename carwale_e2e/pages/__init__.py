"""Pages module - Playwright page objects for carwale.com."""

from .base_page import BasePage
from .home_page import HomePage
from .new_cars_page import NewCarsPage

__all__ = [
    "BasePage",
    "HomePage",
    "NewCarsPage",
]
