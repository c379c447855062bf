"""Statics: upload images and fan out resized variants to object storage."""
