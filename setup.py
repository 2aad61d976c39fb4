from setuptools import setup, find_packages

setup(
    name="pow-lite",
    version="0.1.0",
    description="Proof-of-work share search core for lightweight mining clients",
    packages=find_packages(include=["pow_lite*"]),
    python_requires=">=3.10",
    install_requires=[
        "numpy>=1.24.0",
    ],
    extras_require={
        "dev": ["pytest>=7.0.0", "pytest-asyncio>=0.21.0"],
    },
    entry_points={
        "console_scripts": [
            "pow-lite=pow_lite.main:main",
        ],
    },
)
