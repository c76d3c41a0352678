# setup.py
from setuptools import setup, find_packages

setup(
    name="sitemap_warmer",
    version="0.1.0",
    description="Асинхронный прогрев кэша/CDN по sitemap: SitemapWarmer",
    packages=find_packages(exclude=("tests", "tests.*")),  # автоматически найдёт папку sitemap_warmer
    install_requires=[
        "aiohttp>=3.9",
        "click>=8.1",
        "lxml>=4.9",
        "pydantic>=2.5",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.2",
            "pytest-asyncio>=0.24",
        ],
    },
    entry_points={
        "console_scripts": [
            "sitemap-warmer=sitemap_warmer.cli:main",
        ],
    },
    python_requires=">=3.11",
)
