from setuptools import setup, find_packages

setup(
    name="cabinete",
    version="0.1.0",
    description="Organize photos (or other files) into folders by date",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=[
        "typer>=0.9.0",
        "pydantic>=2.6.1",
        "python-dotenv>=1.0.0",
        "rich>=13.7.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "cabinete=cabinete.cli:main",
        ],
    },
)
