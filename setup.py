from setuptools import setup, find_packages


with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="hateoas-query",
    version="0.1.0",
    description="Follow dotted selectors through hypermedia (HATEOAS) API responses.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    packages=find_packages(exclude=("tests", "tests.*")),
    python_requires=">=3.10",
    install_requires=["PyYAML>=6.0", "httpx>=0.27"],
    extras_require={"test": ["pytest>=8", "pytest-asyncio>=0.23"]},
    entry_points={"console_scripts": ["hateoas-query=hateoas_query.cli:main"]},
)
