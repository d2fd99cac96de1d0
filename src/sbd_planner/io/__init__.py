"""Persistence: JSON record store and record serializers."""
