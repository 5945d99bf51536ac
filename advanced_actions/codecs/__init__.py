"""Calendar link encoders."""
