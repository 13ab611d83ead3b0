"""SimpleDex - constant product exchange engine."""

from simpledex.assets import AssetLedger, InMemoryAssetLedger
from simpledex.config import DexConfig
from simpledex.engine import SimpleDex

__version__ = "0.1.0"
__all__ = ["SimpleDex", "DexConfig", "AssetLedger", "InMemoryAssetLedger", "__version__"]
