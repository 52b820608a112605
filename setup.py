"""Setup configuration for the CarWale browser test suite."""

from setuptools import setup, find_packages

setup(
    name="carwale-e2e",
    version="0.1.0",
    description="Playwright end-to-end test suite for carwale.com with a JSON run reporter",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "pytest>=8.0",
        "playwright>=1.40",
        "pytest-playwright>=0.4.4,<0.8",
        "pytest-xdist>=3.5",
        "pytest-rerunfailures>=14.0",
        "requests>=2.31.0",
        "pyyaml>=6.0",
        "click>=8.1.0",
    ],
    entry_points={
        "console_scripts": [
            "carwale-e2e=carwale_e2e.cli:main",
        ],
        "pytest11": [
            "carwale_e2e=carwale_e2e.plugin",
        ],
    },
)
