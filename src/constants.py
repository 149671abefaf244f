"""Constants used in the project."""

from enum import Enum
from types import MappingProxyType


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    EXIT_WARNINGS = 3


class BuildStrategy(Enum):
    """How build-time requirements are read from pyproject.toml.

    Args:
        Enum (string): Strategy name as used in config files and the CLI.
    """

    REQUIRES = "requires"
    BACKEND = "backend"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    REGISTRY_URL_PYPI = "https://pypi.org/pypi/"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    MAX_CONCURRENCY = 4
    BUILD_STRATEGY = BuildStrategy.REQUIRES.value
    BUILD_STRATEGIES = [s.value for s in BuildStrategy]

    SDIST_PACKAGETYPE = "sdist"
    DIGEST_ALGORITHM = "sha256"
    BUILD_CONFIG_FILE = "pyproject.toml"
    FALLBACK_HASH = "pkgs.lib.fakeHash"
    DEFAULT_BUILD_DEP = "setuptools"

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    ENV_LOG_LEVEL = "NIXPIN_LOG_LEVEL"
    ENV_CONFIG = "NIXPIN_CONFIG"
    OUTPUT_FORMATS = ["json", "csv"]


# PyPI names whose nixpkgs python attribute is already canonical.
NIX_ATTR_OVERRIDES = MappingProxyType({
    "scikit-build-core": "scikit-build-core",
    "setuptools-scm": "setuptools-scm",
    "setuptools": "setuptools",
    "hatchling": "hatchling",
    "hatch-vcs": "hatch-vcs",
    "flit-core": "flit-core",
    "poetry-core": "poetry-core",
    "maturin": "maturin",
    "pdm-backend": "pdm-backend",
    "wheel": "wheel",
    "cython": "cython",
    "ninja": "ninja",
})

# Ordered (substring, nixpkgs attr) pairs; first match wins.
BUILD_BACKEND_FAMILIES = (
    ("scikit_build_core", "scikit-build-core"),
    ("hatchling", "hatchling"),
    ("flit_core", "flit-core"),
    ("poetry", "poetry-core"),
    ("maturin", "maturin"),
    ("pdm", "pdm-backend"),
    ("mesonpy", "meson-python"),
    ("setuptools", "setuptools"),
)
