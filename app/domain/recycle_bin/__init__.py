"""Recycle bin: listing, restoring and purging soft-deleted records"""
