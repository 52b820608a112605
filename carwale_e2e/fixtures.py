"""pytest fixtures for the live CarWale specs.

Builds on pytest-playwright's ``browser_context_args``/``context``/``page``
fixtures and hands tests ready-made page objects.
"""

import pytest
from playwright.sync_api import expect

from .pages import BasePage, HomePage, NewCarsPage
from .settings import SuiteSettings, load_settings


@pytest.fixture(scope="session")
def suite_settings(pytestconfig) -> SuiteSettings:
    return load_settings(pytestconfig.getoption("carwale_config", None))


@pytest.fixture(scope="session")
def base_url(pytestconfig, suite_settings):
    """``--base-url`` if given, otherwise the configured base URL."""
    return pytestconfig.getoption("base_url", None) or suite_settings.base_url


@pytest.fixture(scope="session")
def browser_context_args(browser_context_args, suite_settings):
    return {
        **browser_context_args,
        "viewport": suite_settings.viewport.to_dict(),
        "ignore_https_errors": suite_settings.ignore_https_errors,
    }


@pytest.fixture(scope="session", autouse=True)
def expect_timeout(suite_settings):
    expect.set_options(timeout=suite_settings.expect_timeout_ms)


@pytest.fixture
def context(context, suite_settings):
    context.set_default_timeout(suite_settings.action_timeout_ms)
    context.set_default_navigation_timeout(suite_settings.navigation_timeout_ms)
    return context


@pytest.fixture
def base_page(page, base_url) -> BasePage:
    return BasePage(page, base_url)


@pytest.fixture
def home_page(page, base_url) -> HomePage:
    """Home page, already opened."""
    home = HomePage(page, base_url)
    home.goto()
    return home


@pytest.fixture
def new_cars_page(page, base_url) -> NewCarsPage:
    """New Cars page, already opened."""
    new_cars = NewCarsPage(page, base_url)
    new_cars.goto()
    return new_cars
