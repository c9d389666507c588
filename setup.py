from setuptools import setup, find_packages

setup(
    name="churn_cusum",
    version="0.1.0",
    description="Censored customer lifecycle simulation and CUSUM churn detection benchmark",
    packages=find_packages(include=["churn_cusum", "churn_cusum.*"]),
    install_requires=[
        "pandas>=2.2.0",
        "numpy>=1.26.0",
        "scikit-learn>=1.4.0",
        "matplotlib>=3.8.0",
        "seaborn>=0.13.2",
        "pydantic>=2.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "churn-cusum=churn_cusum.runtime.cli:main",
        ],
    },
    python_requires=">=3.9",
)
