"""
CHIP-8 Emulator - Setup
Installs the pure-Python package. Set CHIP8_CYTHONIZE=1 to also compile
the hot modules with Cython (pure-Python mode annotations).

Compile order:
1. timer.py -> timer.so (simplest)
2. cpu.py -> cpu.so (decode/dispatch loop)
"""
import os

from setuptools import setup, find_namespace_packages
from Cython.Build import cythonize
import numpy as np

compiler_directives = {
    "boundscheck": False,
    "cdivision": True,
    "wraparound": False,
    "infer_types": True,
    "initializedcheck": False,
    "nonecheck": False,
    "overflowcheck": False,
    "language_level": "3",
}

modules_to_compile = [
    "src/chip8/timer.py",
    "src/chip8/cpu.py",
]

ext_modules = []
if os.environ.get("CHIP8_CYTHONIZE") == "1":
    ext_modules = cythonize(
        modules_to_compile,
        compiler_directives=compiler_directives,
        annotate=True,  # HTML annotation for optimization analysis
    )

setup(
    name="chip8_emulator",
    version="0.1.0",
    description="CHIP-8 Emulator with optional Cython optimization",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["chip8", "chip8.*"]),
    python_requires=">=3.8",
    install_requires=[
        "numpy",
        "pygame>=2.0",
        "Cython>=3.0",
    ],
    extras_require={
        "test": ["pytest"],
    },
    ext_modules=ext_modules,
    include_dirs=[np.get_include()],
    zip_safe=False,
)
