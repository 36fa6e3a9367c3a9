from setuptools import find_packages, setup

LIBRARY_NAME = "sparsepm"


setup(
    name=LIBRARY_NAME,
    version="0.1.0",
    description="Dominant eigenpairs of sparse matrices with the power method",
    packages=find_packages(include=[LIBRARY_NAME, f"{LIBRARY_NAME}.*"]),
    python_requires=">=3.10",
    install_requires=[
        "numpy",
        "scipy",
        "torch",
        "wandb",
    ],
    extras_require={
        "test": ["pytest"],
    },
)
