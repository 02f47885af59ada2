from .step_10_prerequisites import PrerequisitesStep
from .step_20_homebrew import HomebrewStep
from .step_30_install_tools import InstallToolsStep
from .step_60_link_dotfiles import LinkDotfilesStep
from .step_90_summary import SummaryStep

__all__ = [
    "PrerequisitesStep",
    "HomebrewStep",
    "InstallToolsStep",
    "LinkDotfilesStep",
    "SummaryStep",
]
