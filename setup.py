from setuptools import setup, find_packages

setup(
    name="amazon-mws",
    version="0.1.0",
    description="Python client for the Amazon Marketplace Web Service (MWS) APIs",
    package_dir={"": "src"},
    packages=find_packages("src"),
    python_requires=">=3.10",
    install_requires=[
        "botocore>=1.31.0",
        "httpx>=0.24.0",
        "pydantic>=2.0.0",
        "structlog>=23.1.0",
    ],
    extras_require={
        "test": ["pytest>=7.0.0"],
    },
)
