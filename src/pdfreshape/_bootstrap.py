"""Package bootstrap: fail fast when core dependencies are missing."""

from pdfreshape.dependencies import ensure_package_dependencies

ensure_package_dependencies()
