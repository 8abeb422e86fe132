"""Install pipeline and batch runner."""

from appnest.core.install.batch import BatchResult, install_apps
from appnest.core.install.pipeline import InstallableApp

__all__ = ["BatchResult", "InstallableApp", "install_apps"]
