"""Action resolution: items, post context, descriptors and the resolution policy."""
