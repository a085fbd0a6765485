"""paks: a package manager for agent skills.

Install skills from the registry, git repositories, or local paths, and
publish them as git-tagged releases.

Example::

    from paks import Installer, PaksSettings, load_config

    settings = PaksSettings()
    config = load_config(settings.config_file)
    result = Installer(config, settings).install("acme/kubernetes-deploy")
"""

__version__ = "0.1.0"

from paks.config import PaksSettings, UserConfig, load_config, save_config  # noqa: E402
from paks.errors import PaksError  # noqa: E402
from paks.install import Installer, InstallResult, InstallStatus  # noqa: E402
from paks.publish import PublishOptions, Publisher, PublishResult  # noqa: E402
from paks.sources import SkillReference, detect_source_type  # noqa: E402

__all__ = [
    "InstallResult",
    "InstallStatus",
    "Installer",
    "PaksError",
    "PaksSettings",
    "PublishOptions",
    "PublishResult",
    "Publisher",
    "SkillReference",
    "UserConfig",
    "__version__",
    "detect_source_type",
    "load_config",
    "save_config",
]
