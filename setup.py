from setuptools import setup, find_namespace_packages

setup(
    name="readloom",
    version="0.1.0",
    packages=find_namespace_packages(include=['api*', 'cli*', 'core*']),
    include_package_data=True,
    install_requires=[
        "fastapi",
        "uvicorn",
        "Click",
        "SQLAlchemy>=2.0",
        "pydantic>=2",
        "requests",
        "Werkzeug",
        "itsdangerous",
        "python-dotenv",
        "alembic",
        "stripe>=16",
        "qrcode",
        "Pillow",
    ],
    extras_require={
        "test": [
            "pytest",
            "httpx",
        ],
    },
    entry_points={
        "console_scripts": [
            "readloom=cli.main:main",
        ],
    },
)
