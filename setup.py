"""
Setup script for rescue-drill.

Rescue Drill is a terminal trainer for two first-aid procedures:

1. CPR - check, call, position, 30 compressions, 2 rescue breaths
2. Heimlich maneuver - identify choking, position, fist, 5 thrusts

Each step is gated by a timed knowledge test and scored on hands-on
practice against a single session countdown.
"""

from setuptools import find_packages, setup

setup(
    name="rescue-drill",
    version="1.0.0",
    description="Timed CPR and Heimlich maneuver training sessions in the terminal",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(include=["rescue_drill", "rescue_drill.*"]),
    py_modules=["config"],
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # HTTP
        "httpx>=0.25.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "rescue-drill=rescue_drill.cli.main:run",
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
    keywords="cpr heimlich first-aid training cli education",
)
