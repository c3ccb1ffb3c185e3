"""FM Importer - imports Papyrus feature-model graphs and requirement diagrams
into a host model graph."""

__version__ = "0.1.0"
