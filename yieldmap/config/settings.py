"""
Central configuration for yieldmap settings.
"""
import os


# Join key column shared by the attribute table and the shapefile DBF
DEFAULT_KEY_FIELD: str = os.getenv("YIELDMAP_KEY_FIELD", "CODE")

# How keys are coerced before matching: "none", "str" or "int"
DEFAULT_KEY_NORMALIZATION: str = os.getenv("YIELDMAP_KEY_NORMALIZATION", "str").lower()

# Thread pool size for polygon assembly; 1 runs sequentially
JOIN_MAX_WORKERS: int = int(os.getenv("YIELDMAP_JOIN_MAX_WORKERS", "1"))

DEFAULT_CRS: str = os.getenv("YIELDMAP_DEFAULT_CRS", "EPSG:4326")
