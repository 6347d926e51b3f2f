"""Setup configuration for idn-discovery."""

from setuptools import setup, find_packages

setup(
    name="idn-discovery",
    version="0.1.0",
    description="IDN server discovery via IDN-Hello broadcast scan",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "psutil>=5.9.0",
        "pyyaml>=6.0",
        "click>=8.1.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "idn-discovery=idn_discovery.cli:main",
        ],
    },
)
