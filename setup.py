from setuptools import find_packages, setup

setup(
    name="presto-stream",
    version="0.1.0",
    description="Streaming async client for Presto",
    packages=find_packages("src"),
    package_dir={"": "src"},
    python_requires=">=3.8",
    install_requires=[
        "anyio>=3.7",
        "httpx",
        "pydantic>=2",
    ],
    extras_require={
        "dev": [
            "pre-commit",
            "mypy",
            "pytest",
            "pytest-mock",
            "pytest-httpx",
            "pytest-trio",
            "trio",
        ]
    },
)
