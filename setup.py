from setuptools import setup, find_namespace_packages

setup(
    name="containerui",
    version="0.1.0",
    packages=find_namespace_packages(where="src", include=["containerui", "containerui.*"]),
    package_dir={"": "src"},
    python_requires=">=3.9",
    install_requires=[
        "pydantic>=2.0",
        "pyyaml>=6.0",
        "click>=8.0",
        "python-dotenv>=1.0",
        "loguru>=0.7",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "psutil>=5.9",
        ],
    },
    entry_points={
        "console_scripts": [
            "containerui=containerui.CLI.main:main",
        ],
    },
)
