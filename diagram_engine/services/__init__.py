"""Service layer - classification, graph construction, layout and processing."""
