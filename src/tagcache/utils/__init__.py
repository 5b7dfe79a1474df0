"""Utility helpers for tagcache."""
