"""Setup configuration for the Room Keeper Highrise bot."""

from setuptools import setup, find_packages

setup(
    name="roomkeeper",
    version="0.0.1",
    description="A Highrise room bot for chat commands and moderation",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.11",
    install_requires=[
        "highrise-bot-sdk",
        "openai",
        "PyYAML",
        "python-dotenv",
        "prompt_toolkit",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
        ],
    },
    entry_points={
        "console_scripts": [
            "roomkeeper=roomkeeper.main:main",
        ],
    },
)
