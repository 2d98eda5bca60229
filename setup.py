from setuptools import setup, find_namespace_packages

setup(
    name="bookshelf",
    version="0.1.0",
    packages=find_namespace_packages(include=['cli*', 'bookshelf*']),
    include_package_data=True,
    install_requires=[
        "Click",
        "SQLAlchemy>=2.0",
        "alembic",
        "psycopg2-binary",
        "pydantic>=2",
        "python-dotenv",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "bookshelf=cli.main:main",
        ],
    },
)
