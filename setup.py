from setuptools import setup, find_packages

setup(
    name="adaptive-complexity-engine",
    version="1.0.0",
    packages=find_packages(include=["adaptive_complexity", "adaptive_complexity.*"]),
    install_requires=[
        "pydantic>=2.0.0",
        "PyYAML>=6.0",
        "python-dotenv>=0.19.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    python_requires=">=3.8",
)
