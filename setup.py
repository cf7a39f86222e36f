from setuptools import setup, find_packages

setup(
    name="sarima-forecasting",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["run_comparison"],
    install_requires=[
        "numpy",
        "pandas",
        "scipy",
        "statsmodels<0.15",
        "duckdb",
        "tqdm",
        "psutil",
    ],
    extras_require={
        "test": ["pytest"],
    },
    python_requires=">=3.8",
)
