"""
Setup script for LatArchiver.
"""

from setuptools import setup, find_packages

# Read the README file
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

# Read requirements
with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

setup(
    name="latarchiver",
    version="0.1.0",
    author="LatArchiver contributors",
    author_email="",
    description="Archive codecs with GPU accelerator selection and password-protected payloads",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["latarchiver", "latarchiver.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Security :: Cryptography",
        "Topic :: System :: Archiving :: Compression",
    ],
    python_requires=">=3.9",
    install_requires=requirements,
    extras_require={
        "dev": [
            "pytest>=7.0.0",
        ],
        "cuda": [
            "cupy-cuda12x>=13.0.0",
        ],
        "vulkan": [
            "wgpu>=0.16.0",
        ],
    },
    keywords="archive compression encryption aes-gcm gpu",
)
