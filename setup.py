"""Setup script for cronkit."""

from setuptools import setup, find_packages

setup(
    name="cronkit",
    version="0.1.0",
    description="Recurring cron jobs for asyncio with retry backoff and cooperative cancellation",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.11",
    install_requires=[
        # Zero core dependencies!
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.21.0",
            "pytest-timeout>=2.1.0",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Framework :: AsyncIO",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Typing :: Typed",
    ],
    keywords=[
        "async",
        "asyncio",
        "cron",
        "scheduler",
        "jobs",
        "backoff",
    ],
    license="Apache-2.0",
    zip_safe=False,
)
