"""Booking lifecycle: availability, status derivation and references"""
