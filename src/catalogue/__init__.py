"""Catalogue bounded context: products and the stock counter."""
