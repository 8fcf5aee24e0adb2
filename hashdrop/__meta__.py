"""Define project metadata
"""

__title__ = "hashdrop"
__summary__ = "A content-addressed file-drop service."

__version__ = "0.1.0"

__install_requires__ = [
    "click>=8.0",
    "fastapi>=0.100",
    "fs>=2.4.16",
    "httpx>=0.24",
    "loguru>=0.7",
    "python-multipart>=0.0.6",
    "setuptools<81",
    "uvicorn>=0.22",
]
__extras_require__ = {"test": ["pytest>=7.0"]}

__author__ = "Derrick Gilland"
__email__ = "dgilland@gmail.com"

__license__ = "MIT License"
