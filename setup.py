"""Setup script for pyaescbc - libcrypto is loaded at runtime through CFFI ABI mode"""

from setuptools import find_packages, setup

setup(
    name="pyaescbc",
    version="0.1.0",
    description="Streaming AES-CBC with PKCS#7 padding over libcrypto or cryptography",
    license="MIT",
    python_requires=">=3.10",
    packages=find_packages(include=["pyaescbc", "pyaescbc.*"]),
    # The cdef header is read when the package is imported
    package_data={"pyaescbc": ["libcrypto_cdef.h"]},
    install_requires=[
        "cffi>=1.15",
        "cryptography>=41",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Topic :: Security :: Cryptography",
    ],
)
