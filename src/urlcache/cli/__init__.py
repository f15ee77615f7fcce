"""Command line interface for urlcache."""
