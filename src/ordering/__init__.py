"""Ordering bounded context: shopping cart, pricing, checkout and order history."""
