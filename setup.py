"""Kastela SDK setup."""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as f:
    long_description = f.read()

setup(
    name="kastela-sdk",
    version="0.2.0",
    packages=find_packages(include=["kastela", "kastela.*"]),
    install_requires=[
        "requests>=2.28.0",
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
    ],
    extras_require={
        "async": [
            "httpx>=0.24.0",
        ],
        "test": [
            "httpx>=0.24.0",
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "cryptography>=41.0.0",
        ],
        "all": [
            "httpx>=0.24.0",
        ],
    },
    python_requires=">=3.10",
    author="Kastela",
    author_email="",
    description="Kastela SDK - Python client for the Kastela data protection server",
    long_description=long_description,
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Security :: Cryptography",
    ],
    keywords="kastela, vault, tokenization, encryption, privacy, sdk",
)
