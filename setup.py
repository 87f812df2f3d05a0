# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="gallerysnap",
    version="1.0.0",
    description="Bundle a folder of images into a portable gallery snapshot and restore it",
    author="Enrique Paredes",
    author_email="eparedesbalen@gmail.com",
    python_requires=">=3.9",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["gallerysnap*"]),
    package_data={
        "gallerysnap": ["interface/locales/*.json"],
    },
    include_package_data=True,
    install_requires=[
        "Pillow>=10.1",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        'console_scripts': [
            'gallerysnap=gallerysnap.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
