"""
Setup script for flashdeck.

flashdeck is a terminal flashcard companion:

1. Sets of question/answer cards, imported from plain text notes
2. Four study modes - flashcards, learn, write and timed test
3. Adaptive queues and retention estimates from your own history

The 'flashdeck' command is the entry point.
"""

from setuptools import find_packages, setup

setup(
    name="flashdeck",
    version="0.3.0",
    description="Terminal flashcards with adaptive study sessions and retention tracking",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Database
        "sqlalchemy>=2.0.0",
        # Config & Validation
        "pydantic>=2.6.0",
        "pydantic-settings>=2.1.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "flashdeck=flashdeck.cli.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Education",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="flashcards learning cli education mastery",
)
