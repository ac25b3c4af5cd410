from setuptools import setup, find_namespace_packages

setup(
    name="campus_circulation",
    version="0.1.0",
    packages=find_namespace_packages(include=['api*', 'cli*', 'core*']),
    include_package_data=True,
    python_requires=">=3.11",
    install_requires=[
        "Click",
        "SQLAlchemy>=2.0",
        "fastapi",
        "pydantic>=2",
        "uvicorn",
    ],
    extras_require={
        "test": [
            "pytest",
            "httpx",  # FastAPI TestClient
        ],
    },
    entry_points={
        "console_scripts": [
            "library=cli.main:main",
        ],
    },
)
