"""Query-side services built on top of an import run."""
