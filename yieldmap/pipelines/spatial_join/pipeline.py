"""
Spatial Join Pipeline
Joins attribute tables onto county polygons and packages the result for rendering
"""
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

import geopandas as gpd
import pandas as pd

from yieldmap.config import settings
from .exporter import to_feature_collection, to_geodataframe
from .join_engine import join
from .sources import records_from_dicts, records_from_shape_records, rows_from_dataframe, rows_from_dicts
from .types import CombinedDataset, GeometryRecordError, Key, NoMatchError

logger = logging.getLogger(__name__)


def _integral(key: Key) -> Key:
    # pandas stores int codes as float64 once a column has NaN: 140100.0 -> 140100
    if isinstance(key, float) and key.is_integer():
        return int(key)
    return key


KEY_NORMALIZERS: Dict[str, Optional[Callable[[Key], Key]]] = {
    "none": None,
    "str": lambda k: str(_integral(k)).strip(),
    "int": lambda k: int(str(_integral(k)).strip()),
}


def get_key_normalizer(name: Optional[str]) -> Optional[Callable[[Key], Key]]:
    name = (name or "none").lower()
    if name not in KEY_NORMALIZERS:
        raise ValueError(f"Unknown key normalization '{name}'; expected one of {sorted(KEY_NORMALIZERS)}")
    return KEY_NORMALIZERS[name]


class SpatialJoinPipeline:
    """
    Pipeline for joining attribute rows onto shapefile geometries
    """

    def __init__(self, key_field: Optional[str] = None):
        self.key_field = key_field or settings.DEFAULT_KEY_FIELD

    def _get_processing_options(self, options: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Merge request options over settings defaults"""
        processing_options = {
            "normalize_keys": settings.DEFAULT_KEY_NORMALIZATION,
            "max_workers": settings.JOIN_MAX_WORKERS,
            "crs": settings.DEFAULT_CRS,
        }
        if options:
            processing_options.update({k: v for k, v in options.items() if v is not None})
        return processing_options

    def run_join(self, rows, records, options: Optional[Dict[str, Any]] = None) -> CombinedDataset:
        """Run the join with resolved options; errors propagate."""
        processing_options = self._get_processing_options(options)
        normalizer = get_key_normalizer(processing_options["normalize_keys"])
        return join(
            rows,
            records,
            key_normalizer=normalizer,
            max_workers=processing_options["max_workers"],
        )

    def join_frames(
        self,
        attributes: pd.DataFrame,
        shape_records: Iterable[Any],
        options: Optional[Dict[str, Any]] = None,
    ) -> Tuple[gpd.GeoDataFrame, CombinedDataset]:
        """
        Join a pandas attribute table onto pyshp shape records

        Args:
            attributes: Attribute table containing the key field
            shape_records: Output of ``shapefile.Reader.iterShapeRecords()``
            options: normalize_keys / max_workers / crs overrides

        Returns:
            GeoDataFrame ready for plotting, and the dataset with its diagnostics
        """
        processing_options = self._get_processing_options(options)
        rows = rows_from_dataframe(attributes, self.key_field)
        records = records_from_shape_records(shape_records, self.key_field)
        dataset = self.run_join(rows, records, processing_options)
        gdf = to_geodataframe(dataset, key_column=self.key_field, crs=processing_options["crs"])
        return gdf, dataset

    def process(
        self,
        rows: List[Dict[str, Any]],
        records: List[Dict[str, Any]],
        options: Optional[Dict[str, Any]] = None,
    ) -> dict:
        """
        Join JSON-style rows and geometry records into a GeoJSON result

        Returns:
            dict: Processing result with GeoJSON feature collection and join metadata
        """
        try:
            processing_options = self._get_processing_options(options)
            logger.info(f"🗺️ Joining {len(rows)} rows onto {len(records)} geometry records by '{self.key_field}'")

            attribute_rows = rows_from_dicts(rows, self.key_field)
            geometry_records = records_from_dicts(records)
            dataset = self.run_join(attribute_rows, geometry_records, processing_options)

            return {
                "success": True,
                "geojson": to_feature_collection(dataset, key_column=self.key_field),
                "metadata": {
                    "key_field": self.key_field,
                    "processing_options": processing_options,
                    **dataset.summary(),
                },
            }

        except NoMatchError as e:
            logger.error(f"❌ Spatial join matched nothing: {e}")
            return {"success": False, "error": str(e), "error_type": "no_match"}
        except (GeometryRecordError, KeyError, ValueError) as e:
            logger.error(f"❌ Invalid spatial join input: {e}")
            return {"success": False, "error": str(e), "error_type": "invalid_input"}

    def get_available_options(self) -> Dict[str, Any]:
        """Options accepted by process()"""
        return {
            "normalize_keys": sorted(KEY_NORMALIZERS),
            "defaults": self._get_processing_options(None),
            "key_field": self.key_field,
        }
