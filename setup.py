"""
Packaging for starlette-statsd.
"""
from setuptools import setup, find_packages

setup(
    name="starlette-statsd",
    version="0.1.0",
    description="Starlette/FastAPI middleware sending request timings and status counts to StatsD",
    packages=find_packages(include=["starlette_statsd", "starlette_statsd.*"]),
    python_requires=">=3.9",
    install_requires=[
        "starlette>=0.35",
        "fastapi>=0.109",
        "pydantic>=2.0",
        "pydantic-settings>=2.0",
        "statsd>=4.0",
        "uvicorn>=0.23",
        "python-dotenv>=1.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "httpx>=0.24",
        ],
    },
)
