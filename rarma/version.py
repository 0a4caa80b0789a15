# rarma/version.py
"""
RARMA Toolbox Version Information

Version and package metadata, accessible programmatically via
``rarma.__version__``. The toolbox follows semantic versioning
(MAJOR.MINOR.PATCH).
"""

# Version components
VERSION_MAJOR = 0
VERSION_MINOR = 1
VERSION_PATCH = 0

# Full version string
__version__ = f"{VERSION_MAJOR}.{VERSION_MINOR}.{VERSION_PATCH}"

# Package metadata
__title__ = "RARMA Toolbox"
__description__ = "Robust estimation of ARMA models"
__license__ = "MIT"

# Python version requirements
__python_requires__ = ">=3.10"

# Package dependencies
__dependencies__ = {
    "numpy": ">=1.26.0",
    "scipy": ">=1.11.3",
    "pandas": ">=2.1.1",
    "numba": ">=0.58.0",
    "statsmodels": ">=0.14.0",
}
