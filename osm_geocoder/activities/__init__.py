"""Import pipeline activities.

Each activity is a plain function or class invoked by the importer:
- accumulate: record store and boundary classification
- parse_osm: osmium streaming reader
- build_hierarchy: polygon assembly and country/settlement/district nesting
- index_entities: junction, node and way documents and their push tasks
"""
