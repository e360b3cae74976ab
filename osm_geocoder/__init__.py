"""OSM Geocoder.

Ingests an OpenStreetMap extract, reconstructs the country, settlement
and district hierarchy from boundary relations, and loads junctions,
named nodes and named ways into a search index for forward and reverse
geocoding.
"""

__version__ = "0.1.0"
