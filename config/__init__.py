"""Configuration for Polar Flow Exporter."""
