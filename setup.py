"""
Setup script for the x-notify subscription lifecycle package.

This package manages a subscriber's relationship with a notification topic:
subscribe request, email confirmation and unsubscription, backed by DynamoDB
and the GC Notify email API.
"""
from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="x-notify-subscriptions",
    version="1.0.0",
    author="x-notify Team",
    description="Subscription lifecycle (subscribe, confirm, unsubscribe) for x-notify topics",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*", "lambda", "lambda.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Communications :: Email",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.11",
    install_requires=[
        # AWS SDK
        "boto3>=1.28.85",
        "botocore>=1.31.85",

        # Notification API authentication
        "PyJWT>=2.8.0",

        # HTTP client
        "requests>=2.31.0",
    ],
    extras_require={
        "dev": [
            # Testing
            "pytest>=7.4.3",
            "pytest-cov>=4.1.0",
            "moto[dynamodb]>=5.0.0",

            # Code quality
            "black>=23.11.0",
            "flake8>=6.1.0",
            "mypy>=1.7.1",

            # Type stubs
            "boto3-stubs[dynamodb]>=1.28.85",
            "types-requests>=2.31.0",
        ],
    },
    include_package_data=True,
    zip_safe=False,
)
