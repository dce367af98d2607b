"""
yieldmap
========

Joins county attribute tables (yields, regression coefficients) onto
shapefile polygons for choropleth rendering.
"""

__version__ = "0.1.0"
