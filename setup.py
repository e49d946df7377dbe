"""
Setup configuration for omnicreative package.
"""

from setuptools import setup, find_packages

setup(
    name="omnicreative",
    version="0.1.0",
    description="AI creative director: copywriting, research, image and video generation",
    packages=find_packages(include=["omnicreative", "omnicreative.*"]),
    python_requires=">=3.10",
    install_requires=[
        "google-genai>=1.50",
        "pydantic>=2.0",
        "python-dotenv>=1.0",
        "streamlit>=1.36",
        "click>=8.1",
        "rich>=13.0",
        "logfire>=3.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "omnicreative=omnicreative.cli.main:cli",
        ],
    },
)
