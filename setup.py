"""Setup configuration for the SwagClan Discord Bot."""

from setuptools import setup, find_packages

setup(
    name="swagclan",
    version="0.1.0",
    description="A Discord bot with per-guild settings, change history and storage",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.11",
    install_requires=[
        "py-cord>=2.4",
        "python-dotenv>=1.0",
        "PyYAML>=6.0",
        "prompt_toolkit>=3.0",
        "jsonschema>=4.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    entry_points={
        "console_scripts": [
            "swagclan=swagclan.main:main",
        ],
    },
)
