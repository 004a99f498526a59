#!/usr/bin/env python3
"""
Setup script for the Wake Word Assistant module.
"""

from setuptools import setup, find_packages

with open("wake_word_assistant/README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="wake-word-assistant",
    version="1.0.0",
    author="Your Name",
    author_email="your.email@example.com",
    description="A streaming voice front end with wake word gating and Ollama replies",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/yourusername/wake-word-assistant",
    packages=find_packages(),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Multimedia :: Sound/Audio :: Speech",
        "Topic :: Scientific/Engineering :: Artificial Intelligence",
    ],
    python_requires=">=3.9",
    install_requires=[
        "numpy",
        "scipy",
        "sounddevice",
        "faster-whisper",
        "ollama>=0.4",
        "httpx",
        "pydantic>=2.0.0",
    ],
    extras_require={
        "webrtc": [
            "webrtcvad-wheels",
        ],
        "test": [
            "pytest",
        ],
        "all": [
            "webrtcvad-wheels",
        ],
    },
    entry_points={
        "console_scripts": [
            "wake-word-assistant=wake_word_assistant.cli:main",
        ],
    },
    include_package_data=True,
    zip_safe=False,
)
