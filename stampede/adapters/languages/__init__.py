"""Language toolchain steps — go, node."""

from stampede.adapters.languages.go import dep_init_step, install_dep_step
from stampede.adapters.languages.node import package_install_step

__all__ = ["dep_init_step", "install_dep_step", "package_install_step"]
