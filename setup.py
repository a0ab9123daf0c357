"""setuptools setup for Lock In.

Install for development:
    pip install -e ".[test]"
    python -m lockin
"""

from setuptools import setup, find_packages

setup(
    name="lockin",
    version="0.1.0",
    description="Reward and progression engine for focus sessions",
    packages=find_packages(include=["lockin", "lockin.*"]),
    python_requires=">=3.10",
    install_requires=[
        "SQLAlchemy>=2.0",
        "PyQt6>=6.5",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        "console_scripts": ["lockin-maintenance=lockin.__main__:main"],
    },
)
