"""
Setup script for dashmath package.
"""

from setuptools import setup, find_packages

setup(
    name="dashmath",
    version="0.1.0",
    packages=find_packages(include=["dashmath", "dashmath.*"]),
    install_requires=[
        # Core numerical dependencies
        "numpy>=1.20.0",
        "pandas>=1.3.0",

        # Web server
        "fastapi>=0.70.0",
        "uvicorn>=0.15.0",
        "pydantic>=1.8.0",

        # Utilities
        "pyyaml>=6.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=6.0.0",
            "scipy>=1.7.0",
            "scikit-learn>=1.0.0",
            "httpx>=0.23.0",
        ],
    },
    entry_points={
        'console_scripts': [
            'dashmath=dashmath.__main__:main',
        ],
    },
    description="Numerical engine for a classification and PCA analytics dashboard",
    keywords="pca, jacobi, naive bayes, nearest centroid, classification metrics",
    python_requires=">=3.8",
)
